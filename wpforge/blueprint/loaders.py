"""
Blueprint Loaders.

Reads Blueprint documents from JSON or YAML files.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)


def load_blueprint(path: str | Path) -> dict[str, Any]:
    """
    Load a raw Blueprint from a ``.json``, ``.yaml`` or ``.yml`` file.

    Returns:
        The raw Blueprint mapping (uncompiled)

    Raises:
        FileNotFoundError: File does not exist
        ValueError: File content is not a mapping
    """
    path = Path(path)
    text = path.read_text(encoding="utf-8")

    if path.suffix.lower() in (".yaml", ".yml"):
        data = yaml.safe_load(text)
    else:
        data = json.loads(text)

    if not isinstance(data, dict):
        raise ValueError(f"Blueprint {path} must contain an object, got {type(data).__name__}")

    logger.info(f"Loaded blueprint from {path} ({len(data.get('steps') or [])} steps)")
    return data
