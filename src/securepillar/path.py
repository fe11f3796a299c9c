"""Colon-delimited paths into pillar documents, e.g. ``some:yaml:path``."""

from typing import List

from securepillar import PathConflictError

SEPARATOR = ":"


def split_path(path: str) -> List[str]:
    # No escaping and no normalisation: `a::b` has an empty middle segment.
    return path.split(SEPARATOR)


def join_path(parts) -> str:
    return SEPARATOR.join(str(part) for part in parts)


def get_path(document: dict, parts: List[str]):
    """Return the value at `parts` or None if it does not exist."""
    value = document
    for part in parts:
        if not isinstance(value, dict) or part not in value:
            return None
        value = value[part]
    return value


def set_path(document: dict, parts: List[str], value):
    """Set the value at `parts`, creating intermediate mappings.

    Raises PathConflictError if an intermediate segment exists but is not
    a mapping.

    """
    node = document
    for i, part in enumerate(parts[:-1]):
        child = node.get(part)
        if child is None:
            child = node[part] = {}
        elif not isinstance(child, dict):
            raise PathConflictError.from_context(
                join_path(parts), join_path(parts[: i + 1])
            )
        node = child
    node[parts[-1]] = value
    return document
