"""Column-name validation for caller-supplied filter and update mappings.

Keys of these mappings end up in SQL as identifiers while values are always
bound parameters, so the keys are the only thing checked here. Nothing is
stripped or escaped: an unsafe key is rejected.
"""
from __future__ import annotations

from typing import Any, Mapping, Optional

from sqlstore.core.errors import InvalidColumn

_UNSAFE_CHARS = ("'", '"', ";")
_UNSAFE_SEQUENCES = ("--",)


def is_valid_column_name(name: str) -> bool:
    if any(ch in name for ch in _UNSAFE_CHARS):
        return False
    return not any(seq in name for seq in _UNSAFE_SEQUENCES)


def validate_filter(filter: Optional[Mapping[str, Any]]) -> None:
    """Raise ``InvalidColumn`` for the first unsafe key in ``filter``."""
    for key in filter or {}:
        if not is_valid_column_name(key):
            raise InvalidColumn(key)
