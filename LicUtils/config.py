import copy
import logging
import os
import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = {
    "lic": {
        "steps": 1,
        "step_size": 1.0,
        "magnification": 1,
        "show_progress": False,
    },
    "noise": {
        "seed": 0,
        "image": None,
    },
    "context": {
        "window_size": [64, 64],
        "gl_major": 3,
        "gl_minor": 3,
    },
    "flow": {
        "grid_size": [64, 64],
        "domain_min": [-2.0, -2.0],
        "domain_max": [2.0, 2.0],
        "expression_x": "-y",
        "expression_y": "x",
        "warp": 0.0,
    },
    "output": {
        "folder": "./output",
        "name": "vector_field_lic",
    },
    "logging": {
        "level": "INFO",
    },
}


def merge_config(base: dict, override: dict) -> dict:
    """Recursively update a copy of ``base`` with the values of ``override``."""
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path=None) -> dict:
    """Load a yaml config file on top of DEFAULT_CONFIG.

    Args:
        path (str, optional): yaml file; None returns the defaults.
    """
    if path is None:
        return copy.deepcopy(DEFAULT_CONFIG)
    if not os.path.exists(path):
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path, 'r') as file:
        args = yaml.safe_load(file) or {}
    if not isinstance(args, dict):
        raise ValueError(f"Config file {path} must contain a mapping, got {type(args).__name__}")
    cfg = merge_config(DEFAULT_CONFIG, args)
    logger.debug(f"Loaded config {path}: {cfg}")
    return cfg
