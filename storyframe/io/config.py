from __future__ import annotations
import copy
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from ..errors import ConfigError


# Relative default searched under the current working directory
DEFAULT_REL = Path("configs") / "config.yaml"
# XDG subpath under $XDG_CONFIG_HOME (or ~/.config if unset)
XDG_SUBPATH = Path("storyframe") / "config.yaml"

DEFAULTS: Dict[str, Any] = {
    "telemetry": True,
    "logs": {"level": "info"},
    "time": {"timezone": "UTC", "format": None},
    "image": {"interval": 30, "order": "random"},
    "transcript": {
        "cron": "0 * * * *",
        "minutes": 60,
        "minimum": 5,
    },
    "openai": {
        "key": "",
        "summary": {
            "model": "gpt-3.5-turbo",
            "prompt": "Summarize the following transcript in a few sentences.",
            "random": "Describe a random scene from everyday life.",
        },
        "image": False,
    },
    # stabilityai is optional and stays absent unless configured
    "system": {
        "port": 3000,
        "storage": {"path": "./storage"},
    },
}


# ---- small helpers --------------------------------------------------------

def _deep_merge(dst: Dict[str, Any], src: Dict[str, Any]) -> Dict[str, Any]:
    """Merge keys from src into dst (deep for dicts); keys already in dst win. Inputs are not mutated."""
    out = dict(dst)
    for k, v in (src or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        elif k not in out:
            out[k] = copy.deepcopy(v)
    return out


def _lower_values(obj: Any) -> Any:
    if isinstance(obj, str):
        return obj.lower()
    if isinstance(obj, dict):
        return {k: _lower_values(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_lower_values(v) for v in obj]
    return obj


def _parse_bool_env(v: str) -> bool:
    return str(v).strip().lower() in {"1", "true", "yes", "on"}


# ---- snapshot -------------------------------------------------------------

@dataclass(frozen=True)
class Configuration:
    """Immutable configuration snapshot.

    `data` is never handed out directly; accessors return deep copies so callers
    cannot mutate the shared snapshot.
    """

    data: Dict[str, Any] = field(default_factory=dict)
    source: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        return copy.deepcopy(self.data)

    def lowercase(self) -> Dict[str, Any]:
        """Deep copy with every string value lower-cased (keys untouched)."""
        return _lower_values(copy.deepcopy(self.data))

    def get(self, key: str, default: Any = None) -> Any:
        return copy.deepcopy(self.data.get(key, default))


def _apply_env_overrides(data: Dict[str, Any], env: Mapping[str, str]) -> Dict[str, Any]:
    """
    Merge operator env overrides into the loaded config (no effect if env vars absent).
    Supported:
      - STORYFRAME_LOG_LEVEL  -> logs.level
      - STORYFRAME_PORT       -> system.port (int when numeric; left as text otherwise)
      - STORYFRAME_TELEMETRY  -> telemetry
      - OPENAI_API_KEY        -> openai.key
      - STABILITY_API_KEY     -> stabilityai.key (only when stabilityai is configured)
    Sections that are not mappings are left alone so validation reports them.
    """
    out = copy.deepcopy(data)

    level = env.get("STORYFRAME_LOG_LEVEL")
    if level and isinstance(out.get("logs"), dict):
        out["logs"]["level"] = level.strip()

    port = env.get("STORYFRAME_PORT")
    if port and isinstance(out.get("system"), dict):
        p = port.strip()
        out["system"]["port"] = int(p) if p.isdigit() else p

    telemetry = env.get("STORYFRAME_TELEMETRY")
    if telemetry is not None:
        out["telemetry"] = _parse_bool_env(telemetry)

    okey = env.get("OPENAI_API_KEY")
    if okey and isinstance(out.get("openai"), dict):
        out["openai"]["key"] = okey

    skey = env.get("STABILITY_API_KEY")
    if skey and isinstance(out.get("stabilityai"), dict):
        out["stabilityai"]["key"] = skey
    return out


# ---- discovery ------------------------------------------------------------

def _coerce_candidate(p: Path) -> Optional[Path]:
    """Resolve a file or a directory (-> its config.yaml) to an existing file, else None."""
    if p.is_dir():
        p = p / "config.yaml"
    if p.is_file():
        return p.resolve()
    return None


def discover_config_path(
    explicit: Optional[str],
    cwd: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Tuple[Optional[Path], str]:
    """Deterministic config discovery.

    Order (only when `explicit` is not provided):
      1) $STORYFRAME_CONFIG (file or dir -> config.yaml)
      2) CWD: ./configs/config.yaml
      3) XDG: ${XDG_CONFIG_HOME:-$HOME/.config}/storyframe/config.yaml

    Returns (selected_path or None, source_tag). Source tags: 'explicit',
    'explicit-missing', 'env:STORYFRAME_CONFIG', 'cwd:configs/config.yaml', 'xdg', 'none'.
    """
    cwd = cwd or Path.cwd()
    env = dict(env if env is not None else os.environ)

    if explicit:
        expanded = Path(os.path.expandvars(explicit)).expanduser()
        sel = _coerce_candidate(expanded)
        if sel is not None:
            return sel, "explicit"
        return expanded, "explicit-missing"

    cenv = env.get("STORYFRAME_CONFIG")
    if cenv:
        sel = _coerce_candidate(Path(os.path.expandvars(cenv)).expanduser())
        if sel is not None:
            return sel, "env:STORYFRAME_CONFIG"

    sel = _coerce_candidate(cwd / DEFAULT_REL)
    if sel is not None:
        return sel, "cwd:configs/config.yaml"

    xdg_base = env.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    sel = _coerce_candidate(Path(xdg_base).expanduser() / XDG_SUBPATH)
    if sel is not None:
        return sel, "xdg"

    return None, "none"


# ---- loader ---------------------------------------------------------------

def load_config(path: str | os.PathLike | None = None, env: Optional[Mapping[str, str]] = None) -> Configuration:
    """
    Load a YAML config merged over DEFAULTS, then apply env overrides.
    Behavior:
      * No path, or a path that does not exist: defaults (plus env overrides).
      * Empty document: defaults.
      * Unreadable file, unparseable YAML or a non-mapping document: ConfigError.
    Values are not validated here; see configs.validate.
    """
    env = os.environ if env is None else env
    data: Dict[str, Any] = {}
    source = None
    if path:
        try:
            with open(path, "r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f)
            source = str(path)
        except FileNotFoundError:
            loaded = None
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"failed to read {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"failed to parse {path}: {e}") from e
        if loaded is not None and not isinstance(loaded, dict):
            raise ConfigError(f"{path}: top-level document must be a mapping, got {type(loaded).__name__}")
        data = loaded or {}

    merged = _deep_merge(data, DEFAULTS)
    return Configuration(data=_apply_env_overrides(merged, env), source=source)


# ---- process-wide snapshot ------------------------------------------------

_CURRENT: Optional[Configuration] = None


def get_config() -> Configuration:
    """Return the process-wide snapshot, loading it once via discovery."""
    global _CURRENT
    if _CURRENT is None:
        selected, _ = discover_config_path(None)
        _CURRENT = load_config(selected)
    return _CURRENT


def set_config(cfg: Configuration | Mapping[str, Any]) -> Configuration:
    global _CURRENT
    if not isinstance(cfg, Configuration):
        cfg = Configuration(data=copy.deepcopy(dict(cfg)))
    _CURRENT = cfg
    return cfg


def reset_config() -> None:
    global _CURRENT
    _CURRENT = None


__all__ = [
    "DEFAULTS",
    "DEFAULT_REL",
    "XDG_SUBPATH",
    "Configuration",
    "discover_config_path",
    "get_config",
    "load_config",
    "reset_config",
    "set_config",
]
