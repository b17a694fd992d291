"""
Startup configuration validation for storyframe.

Public API:
    validate(config=None, return_errors=False) -> list[str]
    validate_config(cfg) -> dict
    validate_config_verbose(cfg) -> (errors, warnings)
    validate_config_api(cfg) -> (ok, errors, cfg_or_none)

- Every rule runs on every call; all violations are reported, never just the first.
- Messages look like "<dotted.path>: <lower-cased description>".
- The input is never mutated.
"""
from __future__ import annotations

import copy
import math
import pprint
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from storyframe.errors import ConfigError
from storyframe.io.config import get_config
from storyframe.io.log import VERBOSE, get_logger
from storyframe.io.redact import redact

__all__ = [
    "IMAGE_ORDERS",
    "LOG_LEVELS",
    "OPENAI_IMAGE_SIZES",
    "STABILITY_STYLES",
    "ImageParams",
    "Toggle",
    "ValidationIssue",
    "area_for_768_engine",
    "area_for_other_engines",
    "collect_issues",
    "multiple_of_64",
    "toggle_of",
    "validate",
    "validate_config",
    "validate_config_api",
    "validate_config_verbose",
]

_logger = get_logger("validate")


# ------------------------------
# Enumerations
# ------------------------------

LOG_LEVELS = ("silent", "error", "warn", "info", "http", "verbose", "debug", "silly")
IMAGE_ORDERS = ("random", "recent")
OPENAI_IMAGE_SIZES = ("1024x1024", "512x512", "256x256")
STABILITY_STYLES = (
    "3d-model",
    "analog-film",
    "anime",
    "cinematic",
    "comic-book",
    "digital-art",
    "enhance",
    "fantasy-art",
    "isometric",
    "line-art",
    "low-poly",
    "modeling-compound",
    "neon-punk",
    "origami",
    "photographic",
    "pixel-art",
    "tile-texture",
)

# Area bounds in pixels
AREA_MIN_768 = 768 * 768
AREA_MIN_OTHER = 512 * 512
AREA_MAX = 1024 * 1024

# Allowed keys per section; anything else is reported as a warning
KNOWN_KEYS: Dict[Tuple[str, ...], set] = {
    (): {"telemetry", "logs", "time", "image", "transcript", "openai", "stabilityai", "system"},
    ("logs",): {"level"},
    ("time",): {"timezone", "format"},
    ("image",): {"interval", "order"},
    ("transcript",): {"cron", "minutes", "minimum"},
    ("openai",): {"key", "summary", "image"},
    ("openai", "summary"): {"model", "prompt", "random"},
    ("openai", "image"): {"size", "style"},
    ("stabilityai",): {"key", "image"},
    ("stabilityai", "image"): {
        "engine_id", "width", "height", "timeout", "cfg_scale", "samples", "steps", "style",
    },
    ("system",): {"port", "storage"},
    ("system", "storage"): {"path"},
}


# ------------------------------
# Issues and tri-state sections
# ------------------------------

PathT = Tuple[Union[str, int], ...]


@dataclass(frozen=True)
class ValidationIssue:
    path: PathT
    message: str

    def dotted(self) -> str:
        return ".".join(str(p) for p in self.path) if self.path else "<root>"

    def render(self) -> str:
        return f"{self.dotted()}: {self.message.lower()}"


class Toggle(Enum):
    """Shape of an optional sub-config: absent, explicitly `false`, or a mapping."""

    ABSENT = "absent"
    DISABLED = "disabled"
    ENABLED = "enabled"


_MISSING = object()


def toggle_of(value: Any, *, nullable: bool = False) -> Optional[Toggle]:
    """Classify an optional sub-config; returns None when the shape is invalid."""
    if value is _MISSING or (nullable and value is None):
        return Toggle.ABSENT
    if value is False:
        return Toggle.DISABLED
    if isinstance(value, dict):
        return Toggle.ENABLED
    return None


# ------------------------------
# Cross-field predicates
# ------------------------------

@dataclass(frozen=True)
class ImageParams:
    engine_id: str
    width: int
    height: int

    @property
    def area(self) -> int:
        return self.width * self.height


def multiple_of_64(p: ImageParams) -> bool:
    return p.width % 64 == 0 and p.height % 64 == 0


def area_for_768_engine(p: ImageParams) -> bool:
    """Engines whose id contains '768' need an area of at least 768x768."""
    if "768" not in p.engine_id:
        return True
    return AREA_MIN_768 <= p.area <= AREA_MAX


def area_for_other_engines(p: ImageParams) -> bool:
    if "768" in p.engine_id:
        return True
    return AREA_MIN_OTHER <= p.area <= AREA_MAX


CROSS_FIELD_RULES: Tuple[Tuple[Callable[[ImageParams], bool], str], ...] = (
    (multiple_of_64, "Width and height must be multiples of 64"),
    (
        area_for_768_engine,
        "Size must be between 589,824 (768x768) and 1,048,576 (1024x1024) for engine_id containing 768",
    ),
    (
        area_for_other_engines,
        "Size must be between 262,144 (512x512) and 1,048,576 (1024x1024) for other engine_ids",
    ),
)


# ------------------------------
# Field helpers
# ------------------------------

def _err(issues: List[ValidationIssue], path: PathT, msg: str) -> None:
    issues.append(ValidationIssue(tuple(path), msg.lower()))


def _type_name(v: Any) -> str:
    if v is None:
        return "null"
    if isinstance(v, bool):
        return "boolean"
    if isinstance(v, int):
        return "integer"
    if isinstance(v, float):
        return "float"
    if isinstance(v, str):
        return "string"
    if isinstance(v, (list, tuple)):
        return "array"
    if isinstance(v, dict):
        return "object"
    return type(v).__name__


def _is_number(v: Any) -> bool:
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        return False
    return not (isinstance(v, float) and math.isnan(v))


def _is_int(v: Any) -> bool:
    if isinstance(v, bool):
        return False
    if isinstance(v, int):
        return True
    return isinstance(v, float) and v.is_integer()


def _lookup(section: Mapping[str, Any], key: str) -> Any:
    return section.get(key, _MISSING)


def _section(issues, parent: Mapping[str, Any], path: PathT, key: str) -> Optional[Dict[str, Any]]:
    v = _lookup(parent, key)
    p = path + (key,)
    if v is _MISSING:
        _err(issues, p, "required")
        return None
    if not isinstance(v, dict):
        _err(issues, p, f"expected object, received {_type_name(v)}")
        return None
    return v


def _bool(issues, sec, path: PathT, key: str) -> None:
    v = _lookup(sec, key)
    if v is _MISSING:
        _err(issues, path + (key,), "required")
    elif not isinstance(v, bool):
        _err(issues, path + (key,), f"expected boolean, received {_type_name(v)}")


def _str(issues, sec, path: PathT, key: str, *, optional: bool = False) -> Optional[str]:
    v = _lookup(sec, key)
    if v is _MISSING or v is None:
        if not optional:
            _err(issues, path + (key,), "required")
        return None
    if not isinstance(v, str):
        _err(issues, path + (key,), f"expected string, received {_type_name(v)}")
        return None
    return v


def _number(
    issues,
    sec,
    path: PathT,
    key: str,
    *,
    integer: bool = False,
    lo: Optional[float] = None,
    hi: Optional[float] = None,
) -> Optional[float]:
    v = _lookup(sec, key)
    p = path + (key,)
    if v is _MISSING:
        _err(issues, p, "required")
        return None
    if not _is_number(v):
        _err(issues, p, f"expected number, received {_type_name(v)}")
        return None
    if integer and not _is_int(v):
        _err(issues, p, f"expected integer, received {_type_name(v)}")
        return None
    ok = True
    if lo is not None and v < lo:
        _err(issues, p, f"number must be greater than or equal to {lo}")
        ok = False
    if hi is not None and v > hi:
        _err(issues, p, f"number must be less than or equal to {hi}")
        ok = False
    if not ok:
        return None
    return int(v) if integer else v


def _enum_message(allowed: Sequence[str], got: Any) -> str:
    expected = " | ".join(f"'{a}'" for a in allowed)
    return f"invalid enum value. expected {expected}, received '{got}'"


def _enum(issues, sec, path: PathT, key: str, allowed: Sequence[str]) -> Optional[str]:
    v = _lookup(sec, key)
    p = path + (key,)
    if v is _MISSING:
        _err(issues, p, "required")
        return None
    if not isinstance(v, str):
        _err(issues, p, f"expected string, received {_type_name(v)}")
        return None
    if v not in allowed:
        _err(issues, p, _enum_message(allowed, v))
        return None
    return v


def _str_list(issues, sec, path: PathT, key: str, *, allowed: Optional[Sequence[str]] = None) -> None:
    """Non-empty list of strings, optionally restricted to `allowed`; each bad element is its own issue."""
    v = _lookup(sec, key)
    p = path + (key,)
    if v is _MISSING:
        _err(issues, p, "required")
        return
    if not isinstance(v, list):
        _err(issues, p, f"expected array, received {_type_name(v)}")
        return
    for i, item in enumerate(v):
        if not isinstance(item, str):
            _err(issues, p + (i,), f"expected string, received {_type_name(item)}")
        elif allowed is not None and item not in allowed:
            _err(issues, p + (i,), _enum_message(allowed, item))
    if len(v) < 1:
        _err(issues, p, "array must contain at least 1 element(s)")


# ------------------------------
# Section rules
# ------------------------------

def _check_openai_image(issues, openai: Dict[str, Any], path: PathT) -> None:
    raw = _lookup(openai, "image")
    p = path + ("image",)
    if raw is _MISSING:
        _err(issues, p, "required")
        return
    state = toggle_of(raw)
    if state is None:
        _err(issues, p, "expected an object or false")
        return
    if state is not Toggle.ENABLED:
        return
    _enum(issues, raw, p, "size", OPENAI_IMAGE_SIZES)
    _str_list(issues, raw, p, "style")


def _check_stability_image(issues, stability: Dict[str, Any], path: PathT) -> None:
    raw = _lookup(stability, "image")
    p = path + ("image",)
    if raw is _MISSING:
        _err(issues, p, "required")
        return
    state = toggle_of(raw)
    if state is None:
        _err(issues, p, "expected an object or false")
        return
    if state is not Toggle.ENABLED:
        return

    engine_id = _str(issues, raw, p, "engine_id")
    width = _number(issues, raw, p, "width", integer=True)
    height = _number(issues, raw, p, "height", integer=True)
    _number(issues, raw, p, "timeout", integer=True)
    _number(issues, raw, p, "cfg_scale", lo=0, hi=35)
    _number(issues, raw, p, "samples", integer=True, lo=1, hi=10)
    _number(issues, raw, p, "steps", integer=True, lo=10, hi=50)
    _str_list(issues, raw, p, "style", allowed=STABILITY_STYLES)

    # Cross-field rules only apply to fields that passed their own checks
    if engine_id is None or width is None or height is None:
        return
    params = ImageParams(engine_id=engine_id, width=int(width), height=int(height))
    for rule, message in CROSS_FIELD_RULES:
        if not rule(params):
            _err(issues, p, message)


def collect_issues(cfg: Any) -> List[ValidationIssue]:
    """Run every rule against `cfg` and return all violations in schema order."""
    issues: List[ValidationIssue] = []
    if not isinstance(cfg, dict):
        _err(issues, (), f"expected object, received {_type_name(cfg)}")
        return issues

    _bool(issues, cfg, (), "telemetry")

    logs = _section(issues, cfg, (), "logs")
    if logs is not None:
        _enum(issues, logs, ("logs",), "level", LOG_LEVELS)

    time_cfg = _section(issues, cfg, (), "time")
    if time_cfg is not None:
        _str(issues, time_cfg, ("time",), "timezone")
        _str(issues, time_cfg, ("time",), "format", optional=True)

    image = _section(issues, cfg, (), "image")
    if image is not None:
        _number(issues, image, ("image",), "interval", lo=10)
        _enum(issues, image, ("image",), "order", IMAGE_ORDERS)

    transcript = _section(issues, cfg, (), "transcript")
    if transcript is not None:
        _str(issues, transcript, ("transcript",), "cron")
        _number(issues, transcript, ("transcript",), "minutes")
        _number(issues, transcript, ("transcript",), "minimum", lo=1)

    openai = _section(issues, cfg, (), "openai")
    if openai is not None:
        _str(issues, openai, ("openai",), "key")
        summary = _section(issues, openai, ("openai",), "summary")
        if summary is not None:
            for k in ("model", "prompt", "random"):
                _str(issues, summary, ("openai", "summary"), k)
        _check_openai_image(issues, openai, ("openai",))

    stability = _lookup(cfg, "stabilityai")
    state = toggle_of(stability, nullable=True)
    if state is Toggle.ENABLED:
        _str(issues, stability, ("stabilityai",), "key")
        _check_stability_image(issues, stability, ("stabilityai",))
    elif state is not Toggle.ABSENT:
        _err(issues, ("stabilityai",), f"expected object, received {_type_name(stability)}")

    system = _section(issues, cfg, (), "system")
    if system is not None:
        _number(issues, system, ("system",), "port")
        storage = _section(issues, system, ("system",), "storage")
        if storage is not None:
            _str(issues, storage, ("system", "storage"), "path")

    return issues


# ------------------------------
# Unknown-key warnings
# ------------------------------

def _lev(a: str, b: str) -> int:
    """Tiny Levenshtein distance (edit distance) for did-you-mean suggestions."""
    la, lb = len(a), len(b)
    dp = list(range(lb + 1))
    for i, ca in enumerate(a, 1):
        prev = dp[0]
        dp[0] = i
        for j, cb in enumerate(b, 1):
            ins = dp[j] + 1
            dele = dp[j - 1] + 1
            sub = prev + (0 if ca == cb else 1)
            prev, dp[j] = dp[j], min(ins, dele, sub)
    return dp[-1]


def _suggest_key(bad: str, allowed: set) -> Optional[str]:
    """Return closest allowed key within distance <= 2, else None."""
    best_key, best_dist = None, 99
    for k in sorted(allowed):
        d = _lev(bad, k)
        if d < best_dist:
            best_key, best_dist = k, d
    return best_key if best_dist <= 2 else None


def _unknown_key_warnings(cfg: Any) -> List[str]:
    warnings: List[str] = []
    for path, allowed in KNOWN_KEYS.items():
        node = cfg
        for seg in path:
            node = node.get(seg) if isinstance(node, dict) else None
        if not isinstance(node, dict):
            continue
        for k in node.keys():
            if k in allowed:
                continue
            sug = _suggest_key(str(k), allowed)
            hint = f" (did you mean '{sug}')" if sug else ""
            dotted = ".".join(path + (str(k),))
            warnings.append(f"W[{dotted}]: unknown key{hint}")
    return warnings


# ------------------------------
# Public API
# ------------------------------

def _snapshot(config: Any) -> Any:
    """Lower-cased view of a Configuration; plain mappings are validated as given."""
    lowercase = getattr(config, "lowercase", None)
    if callable(lowercase):
        return lowercase()
    return config


def validate(config: Any = None, return_errors: bool = False, *, logger=None) -> List[str]:
    """Validate the configuration.

    With return_errors=False the violations go to the log (count, then one line
    each) together with a verbose dump of the redacted configuration, and the
    return value is always an empty list. With return_errors=True nothing is
    logged and the rendered violations are returned (empty list = valid).
    When `config` is omitted the process-wide snapshot is used.
    """
    if config is None:
        config = get_config()
    cfg = _snapshot(config)
    messages = [issue.render() for issue in collect_issues(cfg)]
    if return_errors:
        return messages

    log = logger or _logger
    log.log(VERBOSE, pprint.pformat(redact(cfg), sort_dicts=False))
    if messages:
        log.error("%d validation error(s)", len(messages))
        for m in messages:
            log.error(m)
    return []


def validate_config(cfg: Any) -> Dict[str, Any]:
    """Return a copy of the validated config, or raise ConfigError listing every violation."""
    snap = _snapshot(cfg)
    errors = [issue.render() for issue in collect_issues(snap)]
    if errors:
        raise ConfigError("\n".join(errors))
    return copy.deepcopy(snap)


def validate_config_verbose(cfg: Any) -> Tuple[List[str], List[str]]:
    """Return (errors, warnings); never raises. Warnings cover unknown keys only."""
    snap = _snapshot(cfg)
    errors = [issue.render() for issue in collect_issues(snap)]
    return errors, _unknown_key_warnings(snap)


def validate_config_api(cfg: Any):
    """Stable, test-friendly API.

    Returns a tuple: (ok: bool, errs: list[str], cfg_or_none).
    - On success: (True, [], validated_copy)
    - On validation error: (False, [messages...], None)
    """
    snap = _snapshot(cfg)
    errors = [issue.render() for issue in collect_issues(snap)]
    if errors:
        return False, errors, None
    return True, [], copy.deepcopy(snap)
