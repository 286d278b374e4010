"""Utility helpers for the card profile pipeline."""
from __future__ import annotations

import hashlib
import logging
import re
from typing import Iterable, List, Optional

LOGGER_NAME = "agentmon"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a module level logger configured for the package."""
    logger_name = name or LOGGER_NAME
    logger = logging.getLogger(logger_name)
    root = logging.getLogger(LOGGER_NAME)
    if not root.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            "[%(levelname)s] %(name)s: %(message)s"
        )
        handler.setFormatter(formatter)
        root.addHandler(handler)
        root.setLevel(logging.INFO)
    return logger


def slugify(value: str) -> str:
    """Generate a filesystem friendly slug from ``value``."""
    value = value.strip().replace(" ", "_")
    value = re.sub(r"[^0-9A-Za-z_\-]", "", value)
    value = re.sub(r"_+", "_", value)
    return value


def basename(path: str) -> str:
    """Return the last path segment, accepting both ``/`` and ``\\``."""
    return re.split(r"[\\/]", path)[-1]


def stable_hash(text: str) -> int:
    digest = hashlib.sha256(text.encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big")


def dedupe_preserve_order(values: Iterable[str]) -> List[str]:
    seen: set[str] = set()
    result: List[str] = []
    for value in values:
        if value in seen:
            continue
        seen.add(value)
        result.append(value)
    return result
