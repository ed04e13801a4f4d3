from __future__ import annotations

from typing import Any, Mapping


def flatten_form_pairs(payload: Mapping[str, Any]) -> list[tuple[str, str]]:
    """Flatten a nested mapping into bracketed form pairs.

    ``{"line_items": [{"price": "p", "quantity": 1}]}`` becomes
    ``[("line_items[0][price]", "p"), ("line_items[0][quantity]", "1")]``.
    ``None`` values are dropped, booleans are written as ``true``/``false``,
    and empty mappings or lists produce no pairs. Key order follows the
    input.
    """
    pairs: list[tuple[str, str]] = []
    for key, value in payload.items():
        _flatten_into(pairs, str(key), value)
    return pairs


def _flatten_into(pairs: list[tuple[str, str]], prefix: str, value: Any) -> None:
    if value is None:
        return
    if isinstance(value, Mapping):
        for key, item in value.items():
            _flatten_into(pairs, f"{prefix}[{key}]", item)
        return
    if isinstance(value, (list, tuple)):
        for index, item in enumerate(value):
            _flatten_into(pairs, f"{prefix}[{index}]", item)
        return
    pairs.append((prefix, _scalar_to_str(value)))


def _scalar_to_str(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
