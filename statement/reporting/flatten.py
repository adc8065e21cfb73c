"""
Flatten a nested statement record into dotted-path tokens.

Sequences are skipped on purpose: lists become HTML through the fragment
renderers, never through scalar tokens. ``None`` values are skipped as well so
their placeholders stay visible in the rendered output.
"""
from __future__ import annotations

from typing import Any, Mapping

from .format_utils import format_scalar


def flatten_record(value: Any, prefix: str = "") -> dict[str, str]:
    tokens: dict[str, str] = {}
    _flatten_into(value, prefix, tokens)
    return tokens


def _flatten_into(value: Any, prefix: str, tokens: dict[str, str]) -> None:
    if not isinstance(value, Mapping):
        return
    for key, entry in value.items():
        token = f"{prefix}.{key}" if prefix else str(key)
        if entry is None:
            continue
        if isinstance(entry, Mapping):
            _flatten_into(entry, token, tokens)
            continue
        if isinstance(entry, (list, tuple)):
            continue
        tokens[token] = format_scalar(entry)


def expand_tokens(tokens: Mapping[str, str]) -> dict[str, Any]:
    """Inverse of flatten_record for string leaves: rebuild the nested mapping."""
    nested: dict[str, Any] = {}
    for path, value in tokens.items():
        parts = path.split(".")
        node = nested
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[parts[-1]] = value
    return nested
