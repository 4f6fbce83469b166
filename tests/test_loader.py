"""
Tests for Settings Loaders
==========================
Root config discovery/defaults, metadata parsing and the full load chain.
"""

import logging

import pytest

from kalastatic.errors import MalformedYamlError
from kalastatic.loader import (
    ComposedSettings,
    SettingsLoader,
    find_files,
    load_metadata,
    load_root_config,
    parse_metadata,
    strip_delimiters,
)

from conftest import THEME_PATH


class TestFindFiles:

    def test_sorted_recursive(self, tmp_path):
        for sub in ("b", "a/deep", "."):
            d = tmp_path / sub
            d.mkdir(parents=True, exist_ok=True)
            (d / "kalastatic.yaml").write_text("{}")
        found = find_files(tmp_path, "kalastatic.yaml")
        assert found == sorted(found)
        assert len(found) == 3

    def test_excluded_dirs_skipped(self, tmp_path):
        for sub in ("node_modules/pkg", "vendor", ".git", "ok"):
            d = tmp_path / sub
            d.mkdir(parents=True)
            (d / "kalastatic.yaml").write_text("{}")
        assert find_files(tmp_path, "kalastatic.yaml") == [tmp_path / "ok" / "kalastatic.yaml"]


class TestLoadRootConfig:

    def test_defaults_when_absent(self, tmp_path):
        host_root = tmp_path / "web"
        host_root.mkdir()
        config = load_root_config(host_root, "stark")
        assert config == {
            'source': 'stark/kalastatic',
            'destination': 'stark/kalastatic/build',
        }

    def test_found_above_host_root(self, project):
        config = load_root_config(project, THEME_PATH)
        assert config['source'] == 'web/themes/custom/mytheme/kalastatic/src'
        assert 'pluginOpts' in config

    def test_defaults_filled_independently(self, tmp_path):
        host_root = tmp_path / "web"
        host_root.mkdir()
        (tmp_path / "kalastatic.yaml").write_text("destination: out/build\n")
        config = load_root_config(host_root, "themes/t")
        assert config['source'] == 'themes/t/kalastatic'
        assert config['destination'] == 'out/build'

    def test_source_kept_destination_defaulted(self, tmp_path):
        host_root = tmp_path / "web"
        host_root.mkdir()
        (tmp_path / "kalastatic.yaml").write_text("source: my/src\n")
        config = load_root_config(host_root, "themes/t")
        assert config['source'] == 'my/src'
        assert config['destination'] == 'themes/t/kalastatic/build'

    def test_empty_file_uses_defaults(self, tmp_path):
        host_root = tmp_path / "web"
        host_root.mkdir()
        (tmp_path / "kalastatic.yaml").write_text("")
        config = load_root_config(host_root, "stark")
        assert config['source'] == 'stark/kalastatic'

    def test_malformed_yaml_raises(self, tmp_path):
        host_root = tmp_path / "web"
        host_root.mkdir()
        (tmp_path / "kalastatic.yaml").write_text("source: [unclosed\n")
        with pytest.raises(MalformedYamlError) as exc_info:
            load_root_config(host_root, "stark")
        assert exc_info.value.path.name == "kalastatic.yaml"
        assert "kalastatic.yaml" in str(exc_info.value)

    def test_non_mapping_raises(self, tmp_path):
        host_root = tmp_path / "web"
        host_root.mkdir()
        (tmp_path / "kalastatic.yaml").write_text("- just\n- a list\n")
        with pytest.raises(MalformedYamlError):
            load_root_config(host_root, "stark")

    def test_multiple_matches_last_wins(self, tmp_path, caplog):
        host_root = tmp_path / "web"
        host_root.mkdir()
        (tmp_path / "kalastatic.yaml").write_text("source: top\n")
        (tmp_path / "a").mkdir()
        (tmp_path / "a" / "kalastatic.yaml").write_text("source: a\n")
        (tmp_path / "z").mkdir()
        (tmp_path / "z" / "kalastatic.yaml").write_text("source: z\n")

        with caplog.at_level(logging.WARNING, logger="kalastatic"):
            config = load_root_config(host_root, "stark")

        assert config['source'] == 'z'
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert "Found 3" in warnings[0].getMessage()


class TestMetadataParsing:

    def test_strip_delimiters(self):
        assert strip_delimiters("---\na: 1\n---\n") == "a: 1"

    def test_dashes_inside_values_kept(self):
        text = "---\ntitle: a---b\n---\n"
        assert parse_metadata(text, "x.md") == {'title': 'a---b'}

    def test_text_after_second_delimiter_parsed(self):
        text = "---\na: 1\n---\nb: 2\n"
        assert parse_metadata(text, "x.md") == {'a': 1, 'b': 2}

    def test_empty(self):
        assert parse_metadata("---\n---\n", "x.md") == {}

    def test_malformed(self):
        with pytest.raises(MalformedYamlError):
            parse_metadata("---\na: [1\n---\n", "x.md")


class TestLoadMetadata:

    def test_missing_source_dir(self, tmp_path, caplog):
        with caplog.at_level(logging.DEBUG, logger="kalastatic"):
            result = load_metadata({'source': 'does/not/exist'}, tmp_path)

        assert result == {}
        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert len(errors) == 1
        assert "source directory not found" in errors[0].getMessage()

    def test_custom_logger_receives_diagnostic(self, tmp_path):
        calls = []

        class FakeLogger:
            def error(self, msg, *args, **kwargs):
                calls.append(msg % args)

            def debug(self, *args, **kwargs):
                pass

            def warning(self, *args, **kwargs):
                pass

        assert load_metadata({'source': 'missing'}, tmp_path, FakeLogger()) == {}
        assert len(calls) == 1

    def test_metadata_file_absent(self, tmp_path):
        (tmp_path / "src").mkdir()
        assert load_metadata({'source': 'src'}, tmp_path) == {}

    def test_found_recursively(self, tmp_path):
        nested = tmp_path / "src" / "data"
        nested.mkdir(parents=True)
        (nested / "kalastatic.md").write_text("---\nstylesheets: [a.css]\n---\n")
        assert load_metadata({'source': 'src'}, tmp_path) == {'stylesheets': ['a.css']}

    def test_multiple_matches_last_wins(self, tmp_path, caplog):
        for sub, sheet in (("b", "b.css"), ("a", "a.css")):
            d = tmp_path / "src" / sub
            d.mkdir(parents=True)
            (d / "kalastatic.md").write_text(f"---\nstylesheets: [{sheet}]\n---\n")

        with caplog.at_level(logging.WARNING, logger="kalastatic"):
            result = load_metadata({'source': 'src'}, tmp_path)

        assert result == {'stylesheets': ['b.css']}
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert "Found 2" in warnings[0].getMessage()

    @pytest.mark.parametrize("source", [3, ["src"], {"dir": "src"}])
    def test_non_string_source(self, tmp_path, caplog, source):
        (tmp_path / "src").mkdir()
        result = load_metadata({'source': source}, tmp_path)

        assert result == {}
        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert len(errors) == 1


class TestSettingsLoader:

    def test_nested_project(self, project):
        settings = SettingsLoader(project, THEME_PATH).load()

        assert isinstance(settings, ComposedSettings)
        assert settings.yaml['source'] == 'themes/custom/mytheme/kalastatic/src'
        assert settings.yaml['destination'] == 'themes/custom/mytheme/kalastatic/build'
        assert settings.config['stylesheets'] == ['css/main.css', 'css/print.css']
        assert settings.config['scripts']['footer']['all'] == ['js/vendor.js', 'js/main.js']

    def test_no_root_config(self, tmp_path, caplog):
        host_root = tmp_path / "web"
        host_root.mkdir()

        settings = SettingsLoader(host_root, "stark").load()

        assert settings.yaml == {
            'source': 'stark/kalastatic',
            'destination': 'stark/kalastatic/build',
        }
        assert settings.config == {}
        assert len([r for r in caplog.records if r.levelno == logging.ERROR]) == 1

    def test_composed_settings_dict_form(self):
        settings = ComposedSettings(yaml={'source': 's'}, config={'a': 1})
        assert ComposedSettings.from_dict(settings.to_dict()) == settings
