from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Iterable, List, Union

from .models import FilterMode, TodoRecord


def _is_completed(item: Any) -> bool:
    if isinstance(item, TodoRecord):
        return item.completed
    return bool(item.get("completed"))


# PUBLIC_INTERFACE
def filter_todos(records: Iterable[Any], mode: Union[FilterMode, str] = FilterMode.ALL) -> List[Any]:
    """
    Return the subset of ``records`` shown for a status tab.

    Only object-typed items (TodoRecord or mappings) are considered; anything
    else is skipped. The input is never mutated.

    Raises:
        ValueError: ``mode`` is not one of all/completed/incomplete.
    """
    mode = FilterMode(mode)
    valid = [r for r in records if isinstance(r, (TodoRecord, Mapping))]
    if mode is FilterMode.COMPLETED:
        return [r for r in valid if _is_completed(r)]
    if mode is FilterMode.INCOMPLETE:
        return [r for r in valid if not _is_completed(r)]
    return valid
