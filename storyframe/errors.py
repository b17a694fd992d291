from __future__ import annotations

"""Typed error taxonomy.

Only `storyframe` and `storyframe.errors` are public import roots. Validation
violations are plain strings; these classes are raised at the API edges.
"""

__all__ = [
    "StoryframeError",
    "ConfigError",
    "CLIError",
    "format_error",
]


class StoryframeError(Exception):
    """Base class for all typed, operator-facing errors in storyframe."""
    pass


class ConfigError(StoryframeError):
    """Configuration invalid, unreadable, or not a mapping."""
    pass


class CLIError(StoryframeError):
    """Generic CLI failure wrapper for unexpected errors in CLI code paths."""
    pass


def format_error(e: BaseException) -> str:
    """Return a short, uniform operator-facing message like 'ConfigError: detail'."""
    name = e.__class__.__name__
    msg = str(e).strip()
    return f"{name}: {msg}" if msg else name


# Keep star-export order deterministic for tests and tooling
__all__ = sorted(__all__)
