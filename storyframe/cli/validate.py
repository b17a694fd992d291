"""CLI subcommand: validate: check a config file before starting the service.

Exit codes:
  0 = OK
  1 = Validation errors (or warnings when --strict)
  2 = Load/parse errors or bad usage
"""

from __future__ import annotations

import argparse

from configs.validate import validate, validate_config_verbose
from storyframe.errors import CLIError, ConfigError, format_error
from storyframe.io.config import discover_config_path, load_config, set_config
from storyframe.io.log import configure_logging

from ._exit import INVALID, OK, USER_ERR
from ._io import eprint_once, print_json, set_verbosity

_HELP = "Validate a storyframe config file"
_DESC = (
    "Validate a storyframe config file (YAML). Without a path the config is "
    "discovered via $STORYFRAME_CONFIG, ./configs/config.yaml, then the XDG config dir."
)


def register(subparsers: argparse._SubParsersAction) -> None:
    sp = subparsers.add_parser("validate", help=_HELP, description=_DESC)
    sp.add_argument("path", nargs="?", default=None, help="Path to config file (or a directory holding config.yaml)")
    sp.add_argument("--json", action="store_true", help="Emit a single JSON object on stdout")
    sp.add_argument("--strict", action="store_true", help="Treat warnings as errors (non-zero exit if warnings present)")
    sp.add_argument("-v", "--verbose", action="store_true", help="Also log the redacted configuration and violations")
    sp.add_argument("-q", "--quiet", action="store_true", help="Suppress stderr diagnostics")
    sp.set_defaults(command="validate", func=_run)


def _run(ns: argparse.Namespace) -> int:
    set_verbosity(ns.verbose, ns.quiet)

    selected, source = discover_config_path(ns.path)
    if source == "explicit-missing":
        raise CLIError(f"config file not found: {selected}")
    if ns.verbose:
        eprint_once(f"[storyframe] config: selected={selected if selected else 'none'} (source={source})")

    try:
        cfg = set_config(load_config(selected))
    except ConfigError as e:
        eprint_once(f"error: {format_error(e)}")
        return USER_ERR

    if ns.verbose:
        configure_logging("verbose")
        validate(cfg)

    errors, warnings = validate_config_verbose(cfg)
    ok = not errors and not (ns.strict and warnings)

    if ns.json:
        print_json(
            {
                "ok": ok,
                "source": str(selected) if selected else None,
                "errors": errors,
                "warnings": warnings,
            }
        )
        return OK if ok else INVALID

    if errors:
        print("CONFIG INVALID")
        for e in errors:
            print(e)
    elif ns.strict and warnings:
        print("CONFIG WARNINGS (treated as errors due to --strict)")
        for w in sorted(warnings):
            print(w)
    else:
        print("OK")
        for w in warnings:
            eprint_once(w)
    return OK if ok else INVALID
