"""
CLI -- Command interface

Quiet until needed: prints problems, or one line when there are none.

Commands:
    esindent check PATH...      Report lines whose indentation is off
    esindent levels FILE        Show the expected level of every line
    esindent config             Show (or set) the effective configuration

Exit codes:
    0  no problems
    1  indentation problems found
    2  parse or configuration errors
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Iterator, List, Optional

from .checker import CheckResult, IndentChecker
from .config import Config, ConfigManager
from .core.parsing import default_registry
from .errors import ConfigError, EsIndentError
from .presentation.report import render, render_levels
from .presentation.symbols import get_symbols, safe_print
from . import __version__

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_PROBLEMS = 1
EXIT_ERROR = 2


class EsIndentCLI:
    """Command-line interface for the indentation checker."""

    def __init__(self, project_dir: Path, config: Optional[Config] = None):
        self.project_dir = Path(project_dir)
        self.config_manager = ConfigManager(self.project_dir)
        self.config = config if config is not None else self.config_manager.load()
        self.symbols = get_symbols(self.config.display.symbols)
        self.registry = default_registry()
        self.checker = IndentChecker(self.config.indent)

    # -------------------------------------------------------------------------
    # File discovery
    # -------------------------------------------------------------------------

    def iter_files(self, paths: List[str]) -> Iterator[Path]:
        """
        Expand arguments into checkable files.

        Files named explicitly are always checked; directories are searched
        for supported extensions, minus the exclude patterns.
        """
        for raw in paths:
            path = Path(raw)
            if path.is_dir():
                for candidate in sorted(path.rglob("*")):
                    if not candidate.is_file() or not self.registry.is_supported(candidate):
                        continue
                    if self.registry.is_excluded(candidate.relative_to(path).as_posix()):
                        logger.debug("Excluded %s", candidate)
                        continue
                    yield candidate
            else:
                yield path

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def check(self, paths: List[str], format: Optional[str] = None) -> int:
        """Check files and print a report. Returns the exit code."""
        results: List[CheckResult] = []
        for path in self.iter_files(paths):
            try:
                results.append(self.checker.check_file(path))
            except (EsIndentError, OSError) as e:
                logger.debug("Failed to check %s", path, exc_info=True)
                results.append(CheckResult(path=str(path), error=str(e)))

        safe_print(render(results, format or self.config.display.format, self.symbols))

        if any(result.error is not None for result in results):
            return EXIT_ERROR
        if any(result.violations for result in results):
            return EXIT_PROBLEMS
        return EXIT_OK

    def levels(self, file: str) -> int:
        """Print every line with its expected level."""
        path = Path(file)
        try:
            source = self.checker.parse(path.read_bytes(), path)
            resolver = self.checker.analyze(source)
            levels = self.checker.checked_levels(source, resolver)
        except (EsIndentError, OSError) as e:
            safe_print(f"{self.symbols.check_fail} {path}: {e}", file=sys.stderr)
            return EXIT_ERROR

        safe_print(render_levels(source, levels, self.symbols))
        return EXIT_OK

    def show_config(self, key: Optional[str] = None, value: Optional[str] = None,
                    user: bool = False) -> int:
        """Show configuration, one value, or set a value."""
        if key is not None and value is not None:
            error = self.config_manager.set(key, value, scope="user" if user else "project")
            if error:
                safe_print(f"{self.symbols.check_fail} {error}", file=sys.stderr)
                return EXIT_ERROR
            safe_print(f"{self.symbols.check_pass} {key} = {value}")
            return EXIT_OK
        if key is not None:
            current = self.config_manager.get(key)
            if current is None:
                safe_print(f"{self.symbols.check_fail} Unknown setting: {key}", file=sys.stderr)
                return EXIT_ERROR
            safe_print(current)
            return EXIT_OK
        safe_print(self.config_manager.display())
        return EXIT_OK


def _apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    """CLI flags win over every configuration layer."""
    indent = config.indent
    if getattr(args, 'indent_size', None) is not None:
        indent.indent_size = args.indent_size
    if getattr(args, 'tabs', False):
        indent.indent_type = "tab"
    if getattr(args, 'switch_case', None) is not None:
        indent.switch_case = args.switch_case
    if getattr(args, 'no_indent_script', False):
        indent.indent_script = False
    if getattr(args, 'format', None):
        config.display.format = args.format

    error = config.validate()
    if error:
        raise ConfigError(error)
    return config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="esindent",
        description="esindent -- ECMAScript indentation checker",
        epilog="Expected indentation is derived from syntax, never from the file's own layout."
    )

    parser.add_argument(
        '--project', '-p',
        default=os.environ.get("ESINDENT_PROJECT_PATH", "."),
        help='Project directory holding .esindent/config.yaml (default: ESINDENT_PROJECT_PATH or current)'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Show debug logging'
    )
    parser.add_argument(
        '--version', '-V',
        action='version',
        version=f'esindent {__version__}'
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Style flags shared by check and levels
    style = argparse.ArgumentParser(add_help=False)
    style.add_argument('--indent-size', type=int, help='Spaces per indent level')
    style.add_argument('--tabs', action='store_true', help='Indent with tabs')
    style.add_argument('--switch-case', type=int, help='Indent levels of case clauses')
    style.add_argument('--no-indent-script', action='store_true',
                       help='Do not indent <script> contents past the tag')

    check_parser = subparsers.add_parser('check', parents=[style],
                                         help='Report lines with unexpected indentation')
    check_parser.add_argument('paths', nargs='+', help='Files or directories')
    check_parser.add_argument('--format', choices=['text', 'json'], help='Output format')

    levels_parser = subparsers.add_parser('levels', parents=[style],
                                          help='Show the expected level of every line')
    levels_parser.add_argument('file', help='File to analyze')

    config_parser = subparsers.add_parser('config', help='Show or set configuration')
    config_parser.add_argument('key', nargs='?', help="Setting, e.g. 'indent.indent_size'")
    config_parser.add_argument('value', nargs='?', help='New value')
    config_parser.add_argument('--user', action='store_true',
                               help='Write to the user config instead of the project config')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the esindent CLI.

    Returns:
        Process exit code
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return EXIT_OK

    project_dir = Path(args.project)
    try:
        config = _apply_overrides(ConfigManager(project_dir).load(), args)
    except ConfigError as e:
        safe_print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    cli = EsIndentCLI(project_dir, config)

    if args.command == 'check':
        return cli.check(args.paths)
    if args.command == 'levels':
        return cli.levels(args.file)
    return cli.show_config(args.key, args.value, user=args.user)


if __name__ == '__main__':
    sys.exit(main())
