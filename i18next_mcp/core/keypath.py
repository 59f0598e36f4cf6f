"""Conversion between nested translation trees and flat key paths.

Every function here is pure: documents passed in are never mutated, and
functions that "modify" a document return a structural clone instead.
Only ``dict`` values are treated as nested objects; lists, ``None`` and
other scalars are leaves.
"""

from typing import Any, Dict, List, Tuple

DEFAULT_SEPARATOR = "."


class _Missing:
    """Sentinel for "no value at this path" (``None`` is a legal leaf)."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


def clone_tree(value: Any) -> Any:
    """Structurally clone a JSON tree (dicts and lists are copied)."""
    if isinstance(value, dict):
        return {key: clone_tree(child) for key, child in value.items()}
    if isinstance(value, list):
        return [clone_tree(item) for item in value]
    return value


def flatten(doc: Dict[str, Any], separator: str = DEFAULT_SEPARATOR) -> Dict[str, Any]:
    """
    Flatten a nested document into ``{key_path: leaf_value}``.

    Empty objects have no leaves and are dropped, so ``unflatten`` restores
    the document minus any empty branches.

    Args:
        doc: Nested translation document
        separator: Segment separator for the produced paths

    Returns:
        Ordered mapping of key path to leaf value
    """
    return {path: value for path, (value, _) in flatten_with_depth(doc, separator).items()}


def flatten_with_depth(
    doc: Dict[str, Any], separator: str = DEFAULT_SEPARATOR
) -> Dict[str, Tuple[Any, List[str]]]:
    """Flatten a document, keeping the list of segments for every leaf."""
    result: Dict[str, Tuple[Any, List[str]]] = {}
    _walk(doc, [], separator, result)
    return result


def _walk(
    node: Dict[str, Any],
    segments: List[str],
    separator: str,
    result: Dict[str, Tuple[Any, List[str]]],
) -> None:
    for key, value in node.items():
        path_segments = segments + [str(key)]
        if isinstance(value, dict):
            _walk(value, path_segments, separator, result)
        else:
            result[separator.join(path_segments)] = (value, path_segments)


def unflatten(flat: Dict[str, Any], separator: str = DEFAULT_SEPARATOR) -> Dict[str, Any]:
    """Rebuild a nested document from ``{key_path: value}``."""
    doc: Dict[str, Any] = {}
    for path, value in flat.items():
        _assign(doc, path.split(separator), clone_tree(value))
    return doc


def _assign(doc: Dict[str, Any], segments: List[str], value: Any) -> None:
    current = doc
    for segment in segments[:-1]:
        child = current.get(segment)
        if not isinstance(child, dict):
            # Lossy: a scalar in the way is replaced by an object
            child = {}
            current[segment] = child
        current = child
    current[segments[-1]] = value


def get_value(doc: Dict[str, Any], path: str, separator: str = DEFAULT_SEPARATOR) -> Any:
    """
    Look up the value at ``path``.

    Returns:
        The stored value (possibly ``None``), or ``MISSING`` when a segment
        is absent or traversal hits a non-object before the path ends.
    """
    current: Any = doc
    for segment in path.split(separator):
        if not isinstance(current, dict) or segment not in current:
            return MISSING
        current = current[segment]
    return current


def has_value(doc: Dict[str, Any], path: str, separator: str = DEFAULT_SEPARATOR) -> bool:
    return get_value(doc, path, separator) is not MISSING


def set_value(
    doc: Dict[str, Any], path: str, value: Any, separator: str = DEFAULT_SEPARATOR
) -> Dict[str, Any]:
    """
    Return a clone of ``doc`` with ``value`` stored at ``path``.

    Intermediate objects are created as needed. A non-object value sitting
    at an intermediate segment is overwritten with ``{}``.
    """
    result = clone_tree(doc)
    _assign(result, path.split(separator), clone_tree(value))
    return result


def delete_value(
    doc: Dict[str, Any], path: str, separator: str = DEFAULT_SEPARATOR
) -> Dict[str, Any]:
    """
    Return a clone of ``doc`` without the leaf at ``path``.

    Parents left empty by the deletion are pruned, repeatedly upward.
    Deleting a path that does not exist returns an equivalent clone.
    """
    result = clone_tree(doc)
    segments = path.split(separator)

    # Collect the chain of parents down to the leaf's container
    chain = [result]
    current = result
    for segment in segments[:-1]:
        child = current.get(segment)
        if not isinstance(child, dict):
            return result
        chain.append(child)
        current = child

    if segments[-1] not in current:
        return result
    del current[segments[-1]]

    # Walk back up, dropping containers that are now empty
    for depth in range(len(segments) - 1, 0, -1):
        container = chain[depth]
        if container:
            break
        del chain[depth - 1][segments[depth - 1]]

    return result


def sort_keys(value: Any) -> Any:
    """Recursively sort object keys lexicographically at every level."""
    if isinstance(value, dict):
        return {key: sort_keys(value[key]) for key in sorted(value)}
    return value
