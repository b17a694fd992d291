from __future__ import annotations

import copy
from typing import Dict, Any

__all__ = [
    "make_cfg",
    "make_cfg_with_stability",
    "with_image_params",
]


def _base() -> Dict[str, Any]:
    """Smallest fully valid config: every required section, no image providers enabled."""
    return {
        "telemetry": False,
        "logs": {"level": "info"},
        "time": {"timezone": "utc"},
        "image": {"interval": 30, "order": "random"},
        "transcript": {"cron": "0 * * * *", "minutes": 60, "minimum": 5},
        "openai": {
            "key": "sk-test",
            "summary": {"model": "gpt-3.5-turbo", "prompt": "summarize", "random": "anything"},
            "image": False,
        },
        "system": {"port": 3000, "storage": {"path": "./storage"}},
    }


def make_cfg() -> Dict[str, Any]:
    return _base()


def make_cfg_with_stability(**image_overrides: Any) -> Dict[str, Any]:
    """Valid config with stabilityai enabled on a non-768 engine at 512x512."""
    cfg = _base()
    image = {
        "engine_id": "stable-diffusion-v1-5",
        "width": 512,
        "height": 512,
        "timeout": 60,
        "cfg_scale": 7.0,
        "samples": 1,
        "steps": 30,
        "style": ["cinematic"],
    }
    image.update(image_overrides)
    cfg["stabilityai"] = {"key": "sk-stability", "image": image}
    return cfg


def with_image_params(cfg: Dict[str, Any], **params: Any) -> Dict[str, Any]:
    out = copy.deepcopy(cfg)
    out["stabilityai"]["image"].update(params)
    return out
