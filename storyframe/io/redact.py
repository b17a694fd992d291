from __future__ import annotations

from typing import Any

REDACTED = "[REDACTED]"

# Exact key names and suffixes that carry secrets
_SECRET_KEYS = {"key", "api_key", "token", "secret", "password"}
_SECRET_SUFFIXES = ("_key", "_token", "_secret")


def is_secret_key(name: Any) -> bool:
    if not isinstance(name, str):
        return False
    k = name.strip().lower()
    return k in _SECRET_KEYS or k.endswith(_SECRET_SUFFIXES)


def _redact_value(v: Any) -> Any:
    # Empty/unset secrets stay visible so operators can spot a missing key.
    if v is None or v == "":
        return v
    return REDACTED


def redact(obj: Any) -> Any:
    """Return a structurally identical copy of `obj` with secret-bearing values replaced.

    Accepts a Configuration (its data is redacted), mappings, lists/tuples and scalars.
    The input is never mutated.
    """
    as_dict = getattr(obj, "as_dict", None)
    if callable(as_dict):
        obj = as_dict()
    if isinstance(obj, dict):
        return {
            k: (_redact_value(v) if is_secret_key(k) and not isinstance(v, (dict, list)) else redact(v))
            for k, v in obj.items()
        }
    if isinstance(obj, list):
        return [redact(v) for v in obj]
    if isinstance(obj, tuple):
        return tuple(redact(v) for v in obj)
    return obj


__all__ = ["REDACTED", "is_secret_key", "redact"]
