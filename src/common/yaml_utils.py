"""YAML helpers for scan sidecar metadata and exported offsets.

Simple mappings and short scalar lists are written in flow style so an offsets
file keeps one image per line; nested structures stay in block style.
"""
from __future__ import annotations

import time
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Union

import numpy as np
import yaml

_BASIC_TYPES = (int, str, bool, float, type(None))


def get_timestamp_fields() -> Dict[str, Any]:
    """Return ``last_updated`` (epoch) and ``last_updated_str`` fields for persisted files."""
    now = time.time()
    return {
        "last_updated": now,
        "last_updated_str": datetime.fromtimestamp(now).strftime("%Y-%m-%d %H:%M:%S"),
    }


def _is_basic_types(values: Any) -> bool:
    if isinstance(values, dict):
        return all(isinstance(v, _BASIC_TYPES) for v in values.values())
    if isinstance(values, (list, tuple)):
        return all(isinstance(v, _BASIC_TYPES) for v in values)
    return isinstance(values, _BASIC_TYPES)


class CompactDumper(yaml.SafeDumper):
    """SafeDumper that uses flow style for small flat structures."""


def _represent_dict(dumper: CompactDumper, data: dict) -> yaml.Node:
    flow = not data or (len(data) <= 8 and _is_basic_types(data))
    return dumper.represent_mapping("tag:yaml.org,2002:map", data, flow_style=flow)


def _represent_list(dumper: CompactDumper, data: list) -> yaml.Node:
    flow = not data or (len(data) <= 20 and _is_basic_types(data))
    return dumper.represent_sequence("tag:yaml.org,2002:seq", data, flow_style=flow)


def _represent_tuple(dumper: CompactDumper, data: tuple) -> yaml.Node:
    return _represent_list(dumper, list(data))


def _represent_np_float(dumper: CompactDumper, data: np.floating) -> yaml.Node:
    return dumper.represent_float(float(data))


def _represent_np_int(dumper: CompactDumper, data: np.integer) -> yaml.Node:
    return dumper.represent_int(int(data))


CompactDumper.add_representer(dict, _represent_dict)
CompactDumper.add_representer(list, _represent_list)
CompactDumper.add_representer(tuple, _represent_tuple)
CompactDumper.add_multi_representer(np.floating, _represent_np_float)
CompactDumper.add_multi_representer(np.integer, _represent_np_int)


def load_yaml(file_path: Union[str, Path]) -> dict:
    """Load a YAML mapping. Missing, unreadable or non-mapping files yield ``{}``."""
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            result = yaml.safe_load(f)
            return result if isinstance(result, dict) else {}
    except (OSError, yaml.YAMLError):
        return {}


def save_yaml(file_path: Union[str, Path], data: Any, *, sort_keys: bool = False) -> bool:
    """Write ``data`` with compact formatting. Returns False on I/O or encoding errors."""
    try:
        with open(file_path, "w", encoding="utf-8") as f:
            yaml.dump(
                data,
                f,
                Dumper=CompactDumper,
                default_flow_style=False,
                sort_keys=sort_keys,
                allow_unicode=True,
                width=5000,
            )
        return True
    except (OSError, yaml.YAMLError):
        return False
