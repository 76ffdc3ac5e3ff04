"""Markdown helpers — pulling the fenced YAML block out of agent files."""

from __future__ import annotations

import re
from typing import Any

import yaml

_FENCED_YAML = re.compile(r"^```ya?ml[ \t]*\n(.*?)^```", re.DOTALL | re.MULTILINE)


def extract_yaml_block(content: str) -> str | None:
    """Return the body of the first ```yaml fenced block, or None."""
    match = _FENCED_YAML.search(content)
    if not match:
        return None
    return match.group(1)


def parse_yaml_block(content: str) -> dict[str, Any]:
    """Parse the first fenced YAML block of a Markdown document.

    Raises ``ValueError`` when there is no block or its top level is not a
    mapping, and ``yaml.YAMLError`` when the block is not valid YAML.
    """
    block = extract_yaml_block(content)
    if block is None:
        raise ValueError("no fenced yaml block found")

    data = yaml.safe_load(block)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"yaml block must be a mapping, got {type(data).__name__}")
    return data
