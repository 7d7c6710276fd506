"""
Structured configuration tree.

This module provides:
- An immutable hierarchical key/value store built once at startup
- Section paths using ':' as separator (e.g. 'Database:Host')
- Case-insensitive key lookup per path segment
- Ordered access to the children of a section

The tree is constructed explicitly and passed to whoever needs it; there is
no module-level configuration instance.
"""

from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence

SECTION_SEPARATOR = ":"


def _freeze(value: Any) -> Any:
    """Recursively turn dicts into read-only mappings and lists into tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({str(k): _freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [_thaw(v) for v in value]
    return value


def is_section(value: Any) -> bool:
    """Return True when a tree value has children rather than a scalar value."""
    return isinstance(value, (Mapping, tuple, list))


class ConfigTree:
    """
    Read-only hierarchical configuration.

    Values keep the native types produced by the loader (str, int, float,
    bool, None); sections are mappings or sequences. A ``None`` leaf is
    treated the same as a missing key.
    """

    def __init__(self, data: Optional[Mapping[str, Any]] = None):
        self._root = _freeze(data or {})

    @classmethod
    def empty(cls) -> "ConfigTree":
        return cls({})

    def _child(self, node: Any, segment: str) -> Any:
        if isinstance(node, Mapping):
            if segment in node:
                return node[segment]
            folded = segment.casefold()
            for name, value in node.items():
                if name.casefold() == folded:
                    return value
            return None
        if isinstance(node, tuple):
            if segment.isascii() and segment.isdigit() and int(segment) < len(node):
                return node[int(segment)]
        return None

    def _walk(self, key: str) -> Any:
        node = self._root
        for segment in key.split(SECTION_SEPARATOR):
            node = self._child(node, segment.strip())
            if node is None:
                return None
        return node

    def get(self, key: str) -> Any:
        """
        Get the value stored at a key path.

        Args:
            key: Key or ':'-separated section path

        Returns:
            Scalar value, section (read-only mapping or tuple), or None if absent
        """
        return self._walk(key)

    def __contains__(self, key: str) -> bool:
        return self._walk(key) is not None

    def children(self, key: str) -> List[Any]:
        """
        Get the ordered child values of a section.

        Sequence items are returned in order, mapping values in declared
        order. A missing key or a scalar leaf has no children.
        """
        node = self._walk(key)
        if isinstance(node, Mapping):
            return list(node.values())
        if isinstance(node, tuple):
            return list(node)
        return []

    def keys(self) -> Iterator[str]:
        return iter(self._root.keys())

    def to_dict(self) -> Dict[str, Any]:
        """Return a mutable deep copy of the tree, e.g. for logging."""
        return _thaw(self._root)

    def __len__(self) -> int:
        return len(self._root)

    def __repr__(self) -> str:
        return f"ConfigTree(keys={list(self._root.keys())})"


def merge_sections(base: Mapping[str, Any], overlay: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Deep-merge two configuration mappings; overlay values win.

    Nested mappings are merged key by key (case-insensitively, keeping the
    base spelling). Sequences and scalars in the overlay replace the base
    value wholesale. Keys are stringified on both sides, so YAML keys such as
    ``80`` or ``on`` merge as ``'80'`` and ``'True'``.
    """
    merged: Dict[str, Any] = {str(k): v for k, v in base.items()}
    folded = {k.casefold(): k for k in merged}

    for key, value in overlay.items():
        key = str(key)
        existing_key = folded.get(key.casefold(), key)
        current = merged.get(existing_key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[existing_key] = merge_sections(current, value)
        else:
            merged[existing_key] = value
        folded[existing_key.casefold()] = existing_key

    return merged


def _flatten(prefix: str, value: Any, out: Dict[str, Any]) -> None:
    if isinstance(value, Mapping):
        for k, v in value.items():
            _flatten(f"{prefix}{SECTION_SEPARATOR}{k}" if prefix else str(k), v, out)
    elif isinstance(value, Sequence) and not isinstance(value, str):
        for index, item in enumerate(value):
            _flatten(f"{prefix}{SECTION_SEPARATOR}{index}", item, out)
    else:
        out[prefix] = value


def flatten(tree: ConfigTree) -> Dict[str, Any]:
    """Flatten a tree into ``{'Section:Key': value}`` pairs, in declared order."""
    out: Dict[str, Any] = {}
    _flatten("", tree.to_dict(), out)
    return out
