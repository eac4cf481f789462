"""
Key rewriting for flat maps after a list splice.

Errors, modified and touched flags are kept flat, keyed by full path. When
the list at ``path`` is spliced, every key below ``path[j]`` must follow its
element. All functions are pure and return a new map.
"""

import re
from typing import Callable, Dict, Mapping, Optional, Tuple, TypeVar

V = TypeVar('V')

_INDEXED_SUFFIX = re.compile(r'^\[([0-9]+)\](.*)$', re.DOTALL)


def _split_indexed_key(key: str, path: str) -> Optional[Tuple[int, str]]:
    """Return ``(index, suffix)`` when ``key`` is ``path[index]suffix``."""
    if not key.startswith(path):
        return None
    match = _INDEXED_SUFFIX.match(key[len(path):])
    if match is None:
        return None
    return int(match.group(1)), match.group(2)


def _reindex(flat: Mapping[str, V], path: str, mapping: Callable[[int], Optional[int]]) -> Dict[str, V]:
    """
    Rename every ``path[j]...`` key to ``path[mapping(j)]...``.

    A ``None`` from ``mapping`` drops the key. Keys outside the list are
    copied unchanged.
    """
    result: Dict[str, V] = {}
    renamed: Dict[str, V] = {}
    for key, value in flat.items():
        parts = _split_indexed_key(key, path)
        if parts is None:
            result[key] = value
            continue
        index, suffix = parts
        new_index = mapping(index)
        if new_index is not None:
            renamed[f'{path}[{new_index}]{suffix}'] = value
    result.update(renamed)
    return result


def insert_path_indices(flat: Mapping[str, V], path: str, index: int, count: int = 1) -> Dict[str, V]:
    """Shift keys at ``index`` and above up by ``count``; the new slots get no keys."""
    return _reindex(flat, path, lambda j: j + count if j >= index else j)


def remove_path_indices(flat: Mapping[str, V], path: str, index: int, count: int = 1) -> Dict[str, V]:
    """Drop keys in ``[index, index + count)`` and shift the keys above down."""
    def mapping(j: int) -> Optional[int]:
        if j < index:
            return j
        if j < index + count:
            return None
        return j - count
    return _reindex(flat, path, mapping)


def move_path_indices(flat: Mapping[str, V], path: str, from_index: int, to_index: int) -> Dict[str, V]:
    """
    Follow a single element moved from ``from_index`` to ``to_index``.

    Keys between the two positions shift one slot towards ``from_index``.
    """
    def mapping(j: int) -> int:
        if j == from_index:
            return to_index
        if from_index < j <= to_index:
            return j - 1
        if to_index <= j < from_index:
            return j + 1
        return j
    return _reindex(flat, path, mapping)


def swap_path_indices(flat: Mapping[str, V], path: str, first: int, second: int) -> Dict[str, V]:
    """Exchange the keys of two slots."""
    def mapping(j: int) -> int:
        if j == first:
            return second
        if j == second:
            return first
        return j
    return _reindex(flat, path, mapping)
