"""
Conversion between nested value trees and flat path-keyed maps.

``flatten`` emits an entry for every composite and every leaf, so a caller
can address a whole substructure by its parent path as well as each leaf.
``reconstruct`` is the inverse and is built on ``path_resolver.build``.
"""

import copy
from typing import Any, Dict, Mapping

from formstate.path_resolver import build, parse_path


def _needs_brackets(key: str) -> bool:
    return key == '' or '.' in key or any(char.isspace() for char in key)


def _child_path(prefix: str, key: str, preserve_keys: bool) -> str:
    if preserve_keys and not prefix:
        return key
    if _needs_brackets(key):
        return f'{prefix}[{key}]'
    return f'{prefix}.{key}' if prefix else key


def flatten(tree: Any, prefix: str = '', preserve_keys: bool = False) -> Dict[str, Any]:
    """
    Flatten a value tree into ``{path: value}``.

    List elements always use bracket notation (``a[0]``); mapping keys that
    contain a space or a dot are bracket-wrapped (``a[b c]``).

    Args:
        tree: Mapping or list to flatten
        prefix: Path of ``tree`` itself
        preserve_keys: Keep root keys untouched (they already are paths)

    Returns:
        Flat map of every composite and leaf below ``tree``
    """
    flat: Dict[str, Any] = {}
    if isinstance(tree, Mapping):
        items = ((_child_path(prefix, str(key), preserve_keys), value) for key, value in tree.items())
    elif isinstance(tree, (list, tuple)):
        items = ((f'{prefix}[{index}]', value) for index, value in enumerate(tree))
    else:
        return flat

    for path, value in items:
        flat[path] = value
        if isinstance(value, (Mapping, list, tuple)):
            flat.update(flatten(value, path))
    return flat


def path_depth(path: str) -> int:
    """Number of structural steps in ``path``."""
    return len(parse_path(path))


def reconstruct(flat: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Build a nested tree from ``{path: value}``.

    Entries are applied shallowest first, so a leaf entry always wins over
    the copy of it held by its parent composite. Values are deep-copied.
    """
    tree: Dict[str, Any] = {}
    for path in sorted(flat, key=path_depth):
        tree = build(path, copy.deepcopy(flat[path]), tree)
    return tree


def normalize(tree: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Copy a nested tree through ``flatten`` and ``reconstruct``.

    Mapping keys are taken literally (``'v1.2'`` stays a single key) and every
    container becomes a plain dict or list.
    """
    return reconstruct(flatten(tree))
