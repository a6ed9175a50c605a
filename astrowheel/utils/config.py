# astrowheel/utils/config.py
import os
import yaml

_ENV_OVERRIDES = {
    # env var                   → key in the `layout:` section
    "ASTRO_WHEEL_GAP": "gap",
    "ASTRO_WHEEL_MIN_DISTANCE": "min_distance",
    "ASTRO_WHEEL_SNAP_RADIUS": "seam_snap_radius",
}

class AttrDict(dict):
    """Dict that also supports attribute access: cfg.layout and cfg['layout'] both work."""
    def __getattr__(self, item):
        try:
            return self[item]
        except KeyError as e:
            raise AttributeError(item) from e
    def __setattr__(self, key, value):
        self[key] = value

def _to_attr(obj):
    if isinstance(obj, dict):
        return AttrDict({k: _to_attr(v) for k, v in obj.items()})
    if isinstance(obj, list):
        return [_to_attr(x) for x in obj]
    return obj

def _apply_env(data: dict) -> dict:
    layout = dict(data.get("layout") or {})
    for env_key, cfg_key in _ENV_OVERRIDES.items():
        raw = os.getenv(env_key)
        if raw is None or not raw.strip():
            continue
        try:
            layout[cfg_key] = float(raw)
        except ValueError as e:
            raise ValueError(f"{env_key} must be a number, got {raw!r}") from e
    if layout:
        data["layout"] = layout
    return data

def load_config(path: str):
    """
    Load YAML config from `path` and apply env overrides:
      - ASTRO_WHEEL_GAP            (layout.gap)
      - ASTRO_WHEEL_MIN_DISTANCE   (layout.min_distance)
      - ASTRO_WHEEL_SNAP_RADIUS    (layout.seam_snap_radius)
    Returns an AttrDict for convenient access.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"config root must be a mapping: {path}")
    return _to_attr(_apply_env(data))

def default_config():
    """Built-in defaults (no file), env overrides still applied."""
    return _to_attr(_apply_env({}))
