# gatewheel/utils/config.py
import os
import json
import yaml

DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(__file__), "..", "..", "config", "defaults.yaml")


class AttrDict(dict):
    """Dict that also supports attribute access: cfg.wheel and cfg['wheel'] both work."""
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

def _to_plain(obj):
    if isinstance(obj, dict):
        return {k: _to_plain(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_to_plain(x) for x in obj]
    return obj

def _load_sequence_file(path):
    # A missing or unreadable file is an error: the sequence must never fall back silently.
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        return data.get("sequence")
    return data

def load_config(path: str = None):
    """
    Load YAML config from `path` (default: config/defaults.yaml, or $WHEEL_CONFIG).
    Optional env overrides applied to the `wheel` section:
      - WHEEL_SEQUENCE_FILE (JSON list, or object with a 'sequence' key)
      - WHEEL_PROGRESSION   (cardinalProgression)
      - WHEEL_NORTH         (northPosition)
    Returns an AttrDict for convenient access. Values are not validated here.
    """
    path = path or os.getenv("WHEEL_CONFIG") or DEFAULT_CONFIG_PATH
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    wheel = data.setdefault("wheel", {})
    if not isinstance(wheel, dict):
        return _to_attr(data)

    seq_path = os.getenv("WHEEL_SEQUENCE_FILE")
    if seq_path:
        wheel["sequence"] = _load_sequence_file(seq_path)

    progression = os.getenv("WHEEL_PROGRESSION")
    if progression:
        wheel["cardinalProgression"] = progression

    north = os.getenv("WHEEL_NORTH")
    if north:
        wheel["northPosition"] = north

    return _to_attr(data)

def wheel_document(cfg):
    """Raw wheel document (plain dict) from an already loaded config."""
    return _to_plain(cfg.get("wheel"))

def load_wheel_document(path: str = None):
    """Return the raw wheel document (plain dict) ready for validators.validate()."""
    return wheel_document(load_config(path))
