"""
Circular-reference guard shared by all serializers.

Walks a value tree depth-first and fails if a container is reached
while it is still on the active path. Containers are removed from the
path set on backtrack, so the same sub-object may legally appear twice
(diamond sharing) as long as it never contains itself.
"""

from typing import Any, Optional, Set

from calico.errors import CircularReferenceError
from calico.model import ValueKind, container_kind


def detect_circular_reference(value: Any, path: str = "root", _on_path: Optional[Set[int]] = None) -> None:
    """
    Raise if `value` contains itself.

    Args:
        value: Root of the tree to check
        path: Label of `value`, extended with ".key" and "[index]" while walking

    Raises:
        CircularReferenceError: With the path at which the cycle closed
    """
    kind = container_kind(value)
    if kind is None:
        return

    on_path = set() if _on_path is None else _on_path
    ident = id(value)
    if ident in on_path:
        raise CircularReferenceError(path)

    on_path.add(ident)
    try:
        if kind == ValueKind.MAPPING:
            for key, child in value.items():
                detect_circular_reference(child, f"{path}.{key}", on_path)
        else:
            for index, child in enumerate(value):
                detect_circular_reference(child, f"{path}[{index}]", on_path)
    finally:
        on_path.discard(ident)


__all__ = ["detect_circular_reference"]
