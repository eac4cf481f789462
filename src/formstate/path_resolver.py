"""
Path parsing, lookup and copy-on-write assignment for nested value trees.

A path addresses a location inside a tree of mappings and lists:

    a.b[2].c        mapping key 'a', key 'b', list index 2, key 'c'
    a[b c].d        bracketed mapping key 'b c' (keys with spaces or dots)
    [first name]    bracketed key at the root

Numeric bracket segments index lists, every other segment is a mapping key.
``build`` never mutates its input: every container on the way from the root
to the assigned leaf is copied, untouched branches are shared.
"""

import copy
import logging
import re
from functools import lru_cache
from typing import Any, Mapping, Tuple, Union

from formstate.errors import PathSyntaxError, PathTypeError

logger = logging.getLogger(__name__)

PathStep = Union[str, int]

_INDEX_PATTERN = re.compile(r'^[0-9]+$')


class _Unset:
    """Marker for a location that holds no value at all."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return 'UNSET'

    def __bool__(self) -> bool:
        return False

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __reduce__(self):
        return (_Unset, ())


UNSET = _Unset()


def is_empty(value: Any) -> bool:
    """Return True for the two empty markers, ``None`` and ``UNSET``."""
    return value is None or value is UNSET


def check_path_syntax(path: str) -> None:
    """
    Validate a path string.

    Args:
        path: Path to check

    Raises:
        PathSyntaxError: If the path is malformed
    """
    if not isinstance(path, str):
        raise PathSyntaxError(repr(path), 'path must be a string')
    if '[]' in path:
        raise PathSyntaxError(path, 'missing array index or object attribute')

    in_brackets = False
    previous = ''
    for position, char in enumerate(path):
        if in_brackets:
            if char == '[':
                raise PathSyntaxError(path, 'nested brackets are not allowed')
            if char == ']':
                in_brackets = False
        elif char == '[':
            in_brackets = True
        elif char == ']':
            raise PathSyntaxError(path, 'missing opening bracket "["')
        elif char.isspace():
            raise PathSyntaxError(path, 'whitespace is only allowed inside brackets')
        elif char == '.':
            if position == 0 or previous == '.':
                raise PathSyntaxError(path, 'missing object attribute')
        elif previous == ']':
            raise PathSyntaxError(path, 'expected "." or "[" after "]"')
        previous = char

    if in_brackets:
        raise PathSyntaxError(path, 'missing closing bracket "]"')
    if path.endswith('.'):
        raise PathSyntaxError(path, 'missing object attribute')


def _split_head(path: str) -> Tuple[PathStep, str]:
    """Split a syntax-checked, non-empty path into its first step and the rest."""
    if path.startswith('['):
        end = path.index(']')
        key = path[1:end]
        rest = path[end + 1:]
        if rest.startswith('.'):
            rest = rest[1:]
        return (int(key) if _INDEX_PATTERN.match(key) else key), rest

    dot = path.find('.')
    bracket = path.find('[')
    cuts = [index for index in (dot, bracket) if index != -1]
    if not cuts:
        return path, ''
    cut = min(cuts)
    rest = path[cut + 1:] if cut == dot else path[cut:]
    return path[:cut], rest


@lru_cache(maxsize=1024)
def parse_path(path: str) -> Tuple[PathStep, ...]:
    """
    Parse a path into its structural steps.

    Returns:
        Tuple of steps: ``int`` for list indices, ``str`` for mapping keys
    """
    check_path_syntax(path)
    steps = []
    while path:
        step, path = _split_head(path)
        steps.append(step)
    return tuple(steps)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _get_child(container: Any, step: PathStep) -> Any:
    if isinstance(container, Mapping):
        if step in container:
            return container[step]
        if isinstance(step, int) and str(step) in container:
            return container[str(step)]
        return UNSET
    if _is_sequence(container) and isinstance(step, int):
        return container[step] if step < len(container) else UNSET
    return UNSET


def resolve(path: str, tree: Any, default: Any = UNSET, syntax_checked: bool = False) -> Any:
    """
    Read the value stored at ``path``.

    Missing containers along the way are not an error: the lookup stops and
    ``default`` is returned. A stored ``None`` is returned as is.

    Args:
        path: Path to read
        tree: Value tree to read from
        default: Returned when nothing is stored at ``path``
        syntax_checked: Skip syntax validation (set on recursive calls)

    Returns:
        The stored value, or ``default``
    """
    if not syntax_checked:
        check_path_syntax(path)
    if path == '':
        return tree
    if is_empty(tree):
        return default

    step, rest = _split_head(path)
    child = _get_child(tree, step)
    if child is UNSET:
        return default
    return resolve(rest, child, default, syntax_checked=True)


def _copy_container(tree: Any, step: PathStep, path: str) -> Any:
    """Shallow-copy ``tree`` (or create a fresh container) so ``step`` can be set on it."""
    if isinstance(tree, Mapping):
        return dict(tree)
    if _is_sequence(tree):
        if not isinstance(step, int):
            raise PathTypeError(path, f"cannot use key '{step}' on a list")
        return list(tree)
    # Absent or scalar: a new container replaces it
    return [] if isinstance(step, int) else {}


def _mapping_key(container: Mapping, step: PathStep) -> PathStep:
    if isinstance(step, int) and step not in container:
        return str(step)
    return step


def _set_child(container: Any, step: PathStep, value: Any) -> None:
    if isinstance(container, dict):
        container[_mapping_key(container, step)] = value
        return
    while len(container) <= step:
        container.append(None)
    container[step] = value


def _delete_child(container: Any, step: PathStep) -> None:
    if isinstance(container, dict):
        container.pop(_mapping_key(container, step), None)
    elif step < len(container):
        # list slots cannot be left as holes
        container[step] = None


def build(path: str, value: Any, tree: Any, syntax_checked: bool = False) -> Any:
    """
    Return a copy of ``tree`` with ``value`` stored at ``path``.

    Intermediate containers are created on demand: a list for a numeric
    segment, a dict otherwise. Storing ``UNSET`` removes the key instead.
    ``tree`` itself is never modified.

    Args:
        path: Path to assign
        value: Value to store, or ``UNSET`` to delete
        tree: Source tree
        syntax_checked: Skip syntax validation (set on recursive calls)

    Returns:
        The new tree

    Raises:
        PathSyntaxError: If the path is malformed
        PathTypeError: If a text key is applied to a list
    """
    if not syntax_checked:
        check_path_syntax(path)
    if path == '':
        return value

    step, rest = _split_head(path)
    child = _get_child(tree, step)
    if value is UNSET and child is UNSET:
        return tree

    container = _copy_container(tree, step, path)
    if rest == '' and value is UNSET:
        _delete_child(container, step)
        return container

    base = None if child is UNSET else child
    _set_child(container, step, build(rest, value, base, syntax_checked=True))
    return container


def clone(tree: Any) -> Any:
    """Deep copy of a value tree."""
    return copy.deepcopy(tree)
