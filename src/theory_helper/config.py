# src/theory_helper/config.py
from __future__ import annotations
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional
import copy
import logging
import yaml

logger = logging.getLogger(__name__)

# package root: .../src/theory_helper
PKG_ROOT = Path(__file__).resolve().parent
DEFAULT_CFG_PATH = PKG_ROOT / "config.default.yaml"
USER_CFG_PATH = Path.home() / ".config" / "theory-helper" / "config.yaml"

@dataclass(frozen=True)
class TheorySettings:
    reference_pitch: int = 60
    scale_velocity: int = 64
    suggestion_velocity: int = 80
    beats_per_measure: float = 4.0
    suggestion_duration: float = 1.0
    key_candidates: int = 3
    scale_track_id: str = "theory_helper"
    suggestion_track_id: str = "melody_suggestion"

DEFAULT_SETTINGS = TheorySettings()

# highest scale offset (11) plus the highest tonic index (11) must stay in MIDI range
MAX_REFERENCE_PITCH = 127 - 11 - 11

_VALID = {
    "reference_pitch":     lambda v: 0 <= v <= MAX_REFERENCE_PITCH,
    "scale_velocity":      lambda v: 0 <= v <= 127,
    "suggestion_velocity": lambda v: 0 <= v <= 127,
    "beats_per_measure":   lambda v: v >= 0,
    "suggestion_duration": lambda v: v > 0,
    "key_candidates":      lambda v: v >= 0,
}

def _safe_load(path: Path) -> Dict[str, Any]:
    try:
        if path.exists():
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
            if isinstance(data, dict):
                return data
            logger.warning("ignoring %s: top level is not a mapping", path)
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        # an unreadable config must not take the engine down
        logger.warning("could not read config %s: %s", path, e)
    return {}

def _deep_merge(a: Dict[str, Any], b: Dict[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(a)
    for k, v in (b or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = copy.deepcopy(v)
    return out

def load_config(
    user_path: Optional[Path] = None,
    default_path: Optional[Path] = None,
) -> Dict[str, Any]:
    """
    Loads the packaged defaults, deep-merges the user overrides on top and
    returns a plain dict. Missing files count as empty.
    """
    dpath = Path(default_path) if default_path else DEFAULT_CFG_PATH
    upath = Path(user_path) if user_path else USER_CFG_PATH

    defaults = _safe_load(dpath)
    user = _safe_load(upath)
    cfg = _deep_merge(defaults, user)

    cfg.setdefault("theory", {})
    cfg.setdefault("default_key", {"tonic": "C", "mode": "major"})
    return cfg

def theory_settings(cfg: Dict[str, Any]) -> TheorySettings:
    """Builds TheorySettings from the 'theory' section; unknown keys are ignored."""
    section = cfg.get("theory") or {}
    known = {f.name: f for f in fields(TheorySettings)}
    values: Dict[str, Any] = {}
    for name, value in section.items():
        f = known.get(name)
        if f is None:
            logger.debug("unknown theory setting %r ignored", name)
            continue
        default = getattr(DEFAULT_SETTINGS, name)
        try:
            coerced = type(default)(value)
        except (TypeError, ValueError):
            logger.warning("bad value for theory.%s: %r, using %r", name, value, default)
            continue
        check = _VALID.get(name)
        if check is not None and not check(coerced):
            logger.warning("theory.%s out of range: %r, using %r", name, value, default)
            continue
        values[name] = coerced
    return TheorySettings(**values)
