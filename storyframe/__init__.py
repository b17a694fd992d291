"""storyframe: public API surface.

Only `storyframe` and `storyframe.errors` are public. Everything else is internal.
This module also resolves `__version__` deterministically across installs.
"""
from __future__ import annotations

from typing import Any as _Any
from . import errors as errors  # re-export for star-import; noqa: F401

from importlib.metadata import version as _pkg_version, PackageNotFoundError


def _version_from_metadata() -> str | None:
    try:
        return _pkg_version("storyframe")
    except PackageNotFoundError:
        return None


def _version_from_fallback_module() -> str | None:
    try:
        from ._version import __version__ as v

        return v
    except ImportError:
        return None


__version__ = (
    _version_from_fallback_module()
    or _version_from_metadata()
    or "0+unknown"
)


def __getattr__(name: str) -> _Any:  # PEP 562 lazy exports to avoid import-time cycles
    if name in (
        "validate",
        "validate_config",
        "validate_config_verbose",
        "validate_config_api",
    ):
        # `configs` is a top-level package, not `storyframe.configs`
        from configs import validate as _v

        _g = globals()
        _g.update(
            {
                "validate": _v.validate,
                "validate_config": _v.validate_config,
                "validate_config_verbose": _v.validate_config_verbose,
                "validate_config_api": _v.validate_config_api,
            }
        )
        return _g[name]
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    return list(__all__)


# Star-export surface (deterministic ordering).
__all__ = [
    "__version__",
    "errors",
    "validate",
    "validate_config",
    "validate_config_api",
    "validate_config_verbose",
]
