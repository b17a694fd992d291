from __future__ import annotations

import json
import sys
from typing import Any

# Verbosity gates
VERBOSE = False
QUIET = False


def set_verbosity(verbose: bool = False, quiet: bool = False) -> None:
    global VERBOSE, QUIET
    VERBOSE, QUIET = bool(verbose), bool(quiet)


def eprint_once(msg: str) -> None:
    if not QUIET:
        print(msg, file=sys.stderr)


def print_json(obj: Any) -> None:
    """Dump obj using compact, stable separators (no color)."""
    sys.stdout.write(json.dumps(obj, separators=(",", ":")) + "\n")
