#!/usr/bin/env python3
"""
KalaStatic CLI
==============
Command-line interface for inspecting and rebuilding KalaStatic settings.

Usage:
    kalastatic --host-root web --default-theme themes/custom/mytheme settings
    kalastatic --host-root web --default-theme themes/custom/mytheme library --json
    kalastatic --host-root web --default-theme themes/custom/mytheme attach mytheme --enable mytheme
    kalastatic --host-root web --default-theme themes/custom/mytheme --cache-dir .cache rebuild
    kalastatic --host-root /srv/project/web normalize web/themes/custom
"""

import argparse
import json
import os
import sys

from rich.console import Console

from kalastatic import __version__
from kalastatic.attachment import AttachmentResult
from kalastatic.cache import FileCache, MemoryCache
from kalastatic.errors import KalaStaticError
from kalastatic.paths import normalize_path
from kalastatic.site import KalaStatic
from kalastatic.ui import (
    ConsoleMessenger,
    render_library,
    render_namespaces,
    render_settings,
    setup_logging,
)

# =============================================================================
# Utilities
# =============================================================================

class Output:
    """Handles CLI output with quiet mode support."""

    def __init__(self, quiet: bool = False):
        self.quiet = quiet
        self.console = Console(quiet=quiet)

    def print(self, *args, **kwargs):
        if not self.quiet:
            print(*args, **kwargs)

    def error(self, msg: str):
        print(f"Error: {msg}", file=sys.stderr)

    def success(self, msg: str):
        if not self.quiet:
            print(f"OK: {msg}")

    def json(self, data):
        # JSON output ignores quiet mode so it can be piped
        print(json.dumps(data, indent=2, default=str))


def parse_theme_list(value: str) -> list:
    if not value:
        return []
    return [t.strip() for t in value.split(',') if t.strip()]


def build_site(args) -> KalaStatic:
    if not args.default_theme:
        raise KalaStaticError(
            "--default-theme is required (or set KALASTATIC_DEFAULT_THEME)"
        )
    if args.cache_dir:
        backend = FileCache(cache_dir=args.cache_dir)
    else:
        backend = MemoryCache()
    return KalaStatic(
        host_root=args.host_root,
        default_theme_path=args.default_theme,
        base_path=args.base_path,
        backend=backend,
        messenger=ConsoleMessenger(),
    )


# =============================================================================
# Commands
# =============================================================================

def cmd_settings(args, out: Output):
    """Show composed settings."""
    settings = build_site(args).settings
    if args.json:
        out.json(settings.to_dict())
    else:
        render_settings(settings, out.console)
    return 0


def cmd_library(args, out: Output):
    """Show the library descriptor."""
    ks = build_site(args)
    if args.json:
        out.json(ks.library_info_build())
    else:
        render_library(ks.library(), out.console)
    return 0


def cmd_namespaces(args, out: Output):
    """Show normalized Twig namespaces."""
    namespaces = build_site(args).twig_namespaces()
    if args.json:
        out.json(namespaces)
    elif namespaces:
        render_namespaces(namespaces, out.console)
    else:
        out.print("No Twig namespaces configured.")
    return 0


def cmd_attach(args, out: Output):
    """Decide whether the library is attached for a theme."""
    ks = build_site(args)

    allow_list = None
    if args.enable is not None or args.disable is not None:
        allow_list = {t: True for t in parse_theme_list(args.enable)}
        allow_list.update({t: False for t in parse_theme_list(args.disable)})

    attachments = ks.page_attachments({}, args.theme, allow_list)
    result = ks.decide(args.theme, allow_list)

    if args.json:
        out.json({'decision': result.value, 'attachments': attachments})
    else:
        out.print(f"Decision: {result.value}")
        for library in attachments.get('#attached', {}).get('library', []):
            out.print(f"  attached: {library}")

    return 1 if result is AttachmentResult.NO_POLICY_CONFIGURED else 0


def cmd_rebuild(args, out: Output):
    """Reload settings into the cache."""
    settings = build_site(args).rebuild()
    out.success(f"Settings rebuilt (source: {settings.yaml.get('source')}, "
                f"destination: {settings.yaml.get('destination')})")
    return 0


def cmd_normalize(args, out: Output):
    """Normalize a path against the host root."""
    out.print(normalize_path(args.path, os.path.abspath(args.host_root)))
    return 0


# =============================================================================
# Main
# =============================================================================

def main(argv=None):
    parser = argparse.ArgumentParser(
        prog='kalastatic',
        description='KalaStatic settings resolution for host CMS integrations',
    )
    parser.add_argument('--version', '-V', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--quiet', '-q', action='store_true', help='Suppress non-essential output')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')
    parser.add_argument('--host-root', default=os.getcwd(),
                        help='Host application root (default: current directory)')
    parser.add_argument('--default-theme', default=os.environ.get('KALASTATIC_DEFAULT_THEME'),
                        help='Default theme path relative to the host root')
    parser.add_argument('--base-path', default='/', help='Base path for asset URLs (default: /)')
    parser.add_argument('--cache-dir', help='Persist settings in a file cache under this directory')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    p = subparsers.add_parser('settings', aliases=['s'], help='Show composed settings')
    p.add_argument('--json', '-j', action='store_true', help='Output as JSON')

    p = subparsers.add_parser('library', aliases=['lib'], help='Show the library descriptor')
    p.add_argument('--json', '-j', action='store_true', help='Output as JSON')

    p = subparsers.add_parser('namespaces', aliases=['ns'], help='Show Twig namespaces')
    p.add_argument('--json', '-j', action='store_true', help='Output as JSON')

    p = subparsers.add_parser('attach', help='Attachment decision for a theme')
    p.add_argument('theme', help='Active theme name')
    p.add_argument('--enable', '-e', help='Comma-separated themes with KalaStatic enabled')
    p.add_argument('--disable', '-d', help='Comma-separated themes with KalaStatic disabled')
    p.add_argument('--json', '-j', action='store_true', help='Output as JSON')

    subparsers.add_parser('rebuild', help='Reload settings into the cache')

    p = subparsers.add_parser('normalize', help='Normalize a path against the host root')
    p.add_argument('path', help='Path as written in kalastatic.yaml')

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    setup_logging(verbose=args.verbose)

    cmd_map = {
        's': 'settings',
        'lib': 'library',
        'ns': 'namespaces',
    }
    command = cmd_map.get(args.command, args.command)

    out = Output(quiet=args.quiet)

    commands = {
        'settings': cmd_settings,
        'library': cmd_library,
        'namespaces': cmd_namespaces,
        'attach': cmd_attach,
        'rebuild': cmd_rebuild,
        'normalize': cmd_normalize,
    }

    handler = commands.get(command)
    if handler:
        try:
            return handler(args, out)
        except KeyboardInterrupt:
            out.print("\nCancelled.")
            return 130
        except KalaStaticError as e:
            out.error(str(e))
            return 1

    parser.print_help()
    return 0


if __name__ == '__main__':
    sys.exit(main())
