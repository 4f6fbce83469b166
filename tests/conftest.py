"""
Shared fixtures: a Composer-style project with the host CMS nested in web/.

    project/
        kalastatic.yaml
        web/                                   <- host root
            themes/custom/mytheme/kalastatic/
                src/kalastatic.md
"""

import sys
from pathlib import Path
from textwrap import dedent

import pytest

# Ensure repo root is on path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


THEME_PATH = "themes/custom/mytheme"

ROOT_CONFIG = dedent("""\
    source: web/themes/custom/mytheme/kalastatic/src
    destination: web/themes/custom/mytheme/kalastatic/build
    pluginOpts:
      metalsmith-jstransformer:
        engineOptions:
          twig:
            namespaces:
              atoms: web/themes/custom/mytheme/kalastatic/src/patterns/atoms
              molecules: web/themes/custom/mytheme/kalastatic/src/patterns/molecules
    """)

METADATA = dedent("""\
    ---
    title: My Theme Styleguide
    stylesheets:
      - css/main.css
      - css/print.css
    scripts:
      footer:
        all:
          - js/vendor.js
          - js/main.js
    ---
    """)


@pytest.fixture
def project(tmp_path):
    """Nested project; returns the host root (project/web)."""
    project_dir = tmp_path / "project"
    host_root = project_dir / "web"
    src = host_root / THEME_PATH / "kalastatic" / "src"
    src.mkdir(parents=True)
    (project_dir / "kalastatic.yaml").write_text(ROOT_CONFIG)
    (src / "kalastatic.md").write_text(METADATA)
    return host_root
