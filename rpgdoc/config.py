"""Configuration for rpgdoc

Analyzer windows, thresholds, report layout and sentinel values. Everything
the extractors need is read from ANALYZER_CONFIG unless a caller passes its own
dictionary (see load_config for YAML overrides).
"""

import copy
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)


ANALYZER_CONFIG: Dict[str, Any] = {
    "version": "1.0.0",

    # =========================================================================
    # LOOKAHEAD WINDOWS (lines)
    # =========================================================================
    "windows": {
        "key_list_members": 10,     # KFLD lines scanned after a KLIST
        "message_lookahead": 5,     # nearest message id after a validation
        "option_lookahead": 20,     # WHEN branches scanned after a SELECT
        "status_check": 5,          # status test after a keyed read
    },

    # =========================================================================
    # THRESHOLDS
    # =========================================================================
    "message_table_min_rows": 2,    # rows needed to treat annotation as a table
    "pseudocode_max_lines": 60,     # body lines per subroutine

    # =========================================================================
    # REPORT LAYOUT
    # =========================================================================
    "report": {
        "banner_char": "═",
        "banner_width": 71,
        "ellipsis": "...",
        "file_columns": {
            "file_name": 12,
            "purpose": 12,
            "access_type": 11,
            "key_fields": 22,
            "key_kind": 13,
        },
        "mapping_columns": {
            "source_field": 15,
            "target_field": 15,
            "target_file": 15,
            "transform_notes": 20,
        },
    },

    # =========================================================================
    # SENTINELS
    # =========================================================================
    "sentinels": {
        "program_name": "UNKNOWN_PROGRAM",
        "not_available": "N/A",
        "message_not_found": "Message text not found in message list",
        "target_file": "context dependent",
    },
}


def get_config() -> Dict[str, Any]:
    """Get a private copy of the default configuration"""
    return copy.deepcopy(ANALYZER_CONFIG)


def _merge(base: Dict[str, Any], overrides: Dict[str, Any], path: str = "") -> None:
    for key, value in overrides.items():
        dotted = f"{path}{key}"
        if key not in base:
            logger.warning(f"Ignoring unknown config key: {dotted}")
            continue
        if isinstance(base[key], dict):
            if not isinstance(value, dict):
                raise ValueError(f"Config key '{dotted}' must be a mapping")
            _merge(base[key], value, path=f"{dotted}.")
        else:
            base[key] = value


def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load configuration, applying YAML overrides on top of the defaults.

    Args:
        path: Optional YAML file. Only keys present in ANALYZER_CONFIG are honored.

    Returns:
        Effective configuration dictionary
    """
    config = get_config()
    if path is None:
        return config

    with open(path, "r", encoding="utf-8") as f:
        overrides = yaml.safe_load(f)

    if overrides is None:
        return config
    if not isinstance(overrides, dict):
        raise ValueError(f"Config file {path} must contain a mapping at top level")

    _merge(config, overrides)
    logger.info(f"Loaded config overrides from {path}")
    return config
