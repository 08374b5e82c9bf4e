#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import fields
from typing import Iterator, List

from fp_ast import Node


# Statement lists are edited by node identity, never by a cached index:
# earlier insertions shift positions under the traversal.

def index_of(container: List[Node], node: Node) -> int:
    for i, candidate in enumerate(container):
        if candidate is node:
            return i
    raise ValueError(f"{type(node).__name__} is not in the given statement list")


def insert_before(container: List[Node], anchor: Node, new: Node) -> None:
    container.insert(index_of(container, anchor), new)


def insert_after(container: List[Node], anchor: Node, new: Node) -> None:
    container.insert(index_of(container, anchor) + 1, new)


def remove(container: List[Node], node: Node) -> None:
    del container[index_of(container, node)]


def iter_children(node: Node) -> Iterator[Node]:
    """Direct child nodes of `node`, in field order."""
    for f in fields(node):
        if f.name in ("span", "origin"):
            continue
        value = getattr(node, f.name)
        if isinstance(value, Node):
            yield value
        elif isinstance(value, list):
            for item in value:
                if isinstance(item, Node):
                    yield item


def walk(node: Node) -> Iterator[Node]:
    """Pre-order walk of `node` and all its descendants."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(list(iter_children(current))))
