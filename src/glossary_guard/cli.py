"""
Point d'entrée en ligne de commande.

Commandes :
- `glossary-guard validate FILE [--langs en,fr] [--fix-mode MODE] [--rerun] [--write]`
- `glossary-guard rules`

Codes de sortie :
- 0 : fichier valide
- 1 : au moins un FAIL/ERROR ou arrêt anticipé
- 2 : escalade hard-fail, annulation ou erreur de configuration
"""

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence

from .checks.base import FixMode
from .checks.context import background
from .checks.errors import ConfigError, HardFailError, PipelineCancelledError
from .checks.registry import CheckRegistry
from .config import load_declared_languages, load_run_options, parse_languages
from .logger import get_logger, set_console_level
from .report import render_report
from .rules import register_builtin_rules
from .validator import validate

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_NOT_OK = 1
EXIT_ABORTED = 2


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="glossary-guard",
        description="Validate and auto-fix semicolon-separated glossary CSV files.",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    pv = sub.add_parser("validate", help="Run all built-in rules on a glossary file")
    pv.add_argument("file", help="Glossary CSV file")
    pv.add_argument("--langs", default=None, help="Declared languages, comma-separated (e.g. en,fr)")
    pv.add_argument(
        "--fix-mode",
        default=None,
        choices=[mode.value for mode in FixMode],
        help="When to attempt auto-fixes (default: from environment, else never)",
    )
    rerun = pv.add_mutually_exclusive_group()
    rerun.add_argument("--rerun", dest="rerun", action="store_true", default=None, help="Re-validate after a fix")
    rerun.add_argument("--no-rerun", dest="rerun", action="store_false", help="Do not re-validate after a fix")
    pv.add_argument("--hard-fail", action="store_true", default=None, help="Abort with exit code 2 on any ERROR")
    pv.add_argument("--write", action="store_true", help="Write the fixed content when fixes were applied")
    pv.add_argument("--output", default=None, help="Destination for --write (default: final file path)")
    pv.add_argument("--env-file", default=None, help="Explicit .env file")
    pv.add_argument("--progress", action="store_true", help="Show a progress bar")
    pv.add_argument("--verbose", "-v", action="store_true", help="Show debug logs on the console")

    sub.add_parser("rules", help="List registered rules in execution order")
    return p


def _cmd_rules(registry: CheckRegistry) -> int:
    critical, normal = registry.split()
    for unit in critical + normal:
        kind = "fail-fast" if unit.fail_fast else "normal"
        print(f"{unit.priority:>3}  {unit.name:<34} {kind}")
    return EXIT_OK


def _cmd_validate(args: argparse.Namespace, registry: CheckRegistry) -> int:
    if args.verbose:
        set_console_level(logging.DEBUG)

    try:
        opts = load_run_options(args.env_file)
        langs = (
            parse_languages(args.langs)
            if args.langs is not None
            else load_declared_languages(args.env_file)
        )
    except ConfigError as e:
        print(f"❌ Configuration invalide : {e}", file=sys.stderr)
        return EXIT_ABORTED

    # Les options CLI priment sur l'environnement
    if args.fix_mode is not None:
        opts = replace(opts, fix_mode=FixMode.parse(args.fix_mode))
    if args.rerun is not None:
        opts = replace(opts, rerun_after_fix=args.rerun)
    if args.hard_fail:
        opts = replace(opts, hard_fail_on_error=True)

    path = Path(args.file)
    try:
        data = path.read_bytes()
    except OSError as e:
        print(f"❌ Lecture impossible de {path} : {e}", file=sys.stderr)
        return EXIT_ABORTED

    try:
        summary = validate(
            background(),
            str(path),
            data,
            langs,
            opts,
            registry=registry,
            show_progress=args.progress,
        )
    except (HardFailError, PipelineCancelledError) as e:
        print(render_report(e.summary))
        print(f"❌ {e}", file=sys.stderr)
        return EXIT_ABORTED

    written_to = ""
    if args.write and summary.applied_fixes:
        target = Path(args.output or summary.final_path)
        target.write_bytes(summary.final_data)
        written_to = str(target)
        logger.info(f"💾 Fichier corrigé écrit : {target}")

    print(render_report(summary, written_to=written_to))
    return EXIT_OK if summary.ok else EXIT_NOT_OK


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    registry = register_builtin_rules(CheckRegistry())

    if args.cmd == "rules":
        return _cmd_rules(registry)
    return _cmd_validate(args, registry)


if __name__ == "__main__":
    sys.exit(main())
