"""Breadth-first flattening of JSON values into pointer records."""

from __future__ import annotations

from collections import deque
from typing import Any, Iterator

from jaesve.models import Document, JType, Record, render_leaf


def flatten(document: Document) -> Iterator[Record]:
    """Yield the records of a document in breadth-first discovery order.

    Objects announce nested containers with a value-less record as soon as
    they are seen; arrays do not. The root itself only produces a record
    when it is a leaf.
    """
    ident = document.identifier
    queue: deque[tuple[Any, str]] = deque([(document.value, document.base_path)])

    while queue:
        value, path = queue.popleft()
        kind = JType.of(value)

        if kind is JType.OBJECT:
            for key, child in value.items():
                child_path = f"{path}/{key}"
                child_kind = JType.of(child)
                if child_kind.is_container:
                    yield Record(ident, child_path, child_kind, None)
                queue.append((child, child_path))
        elif kind is JType.ARRAY:
            for index, child in enumerate(value):
                queue.append((child, f"{path}/{index}"))
        else:
            yield Record(ident, path, kind, render_leaf(value))


def flatten_value(value: Any, identifier: int = 1, base_path: str = "") -> Iterator[Record]:
    """Flatten a bare JSON value."""
    return flatten(Document(identifier, value, base_path))
