"""Traversal context: open-node stack plus global and per-node key-value scopes"""

from contextlib import contextmanager
from typing import Any, Iterator

from blockmd.core.mdast import MdNode, Root
from blockmd.errors import WalkError


class WalkContext:
    """Mutable state threaded through one walk.

    The innermost open node is the insertion point: ``open_node`` appends the
    new node to it and pushes the new node. Each open node carries its own
    local key-value scope that disappears when the node is closed; the global
    scope lives for the whole walk.
    """

    def __init__(self, root: Root):
        self._stack: list[MdNode] = [root]
        self._locals: list[dict[str, Any]] = [{}]
        self._globals: dict[str, Any] = {}

    @property
    def root(self) -> Root:
        return self._stack[0]

    @property
    def depth(self) -> int:
        """Number of open nodes above the root."""
        return len(self._stack) - 1

    def current_node(self) -> MdNode:
        return self._stack[-1]

    def open_node(self, node: MdNode) -> "WalkContext":
        """Append node to the current node's children and make it current."""
        parent = self._stack[-1]
        children = getattr(parent, "children", None)
        if children is None:
            raise WalkError(f"Cannot open {node.type} inside childless {parent.type}")
        children.append(node)
        self._stack.append(node)
        self._locals.append({})
        return self

    def close_node(self) -> "WalkContext":
        if len(self._stack) == 1:
            raise WalkError("Cannot close the root node")
        self._stack.pop()
        self._locals.pop()
        return self

    def append(self, node: MdNode) -> "WalkContext":
        """Open and immediately close a leaf node."""
        return self.open_node(node).close_node()

    @contextmanager
    def opened(self, node: MdNode) -> Iterator[MdNode]:
        """Keep node open for the duration of the block, closing it on every exit path."""
        self.open_node(node)
        try:
            yield node
        finally:
            self.close_node()

    def get_global(self, key: str, default: Any = None) -> Any:
        return self._globals.get(key, default)

    def set_global(self, key: str, value: Any) -> "WalkContext":
        self._globals[key] = value
        return self

    def get_node_context(self, key: str, default: Any = None) -> Any:
        """Read key from the innermost open node's local scope."""
        return self._locals[-1].get(key, default)

    def set_node_context(self, key: str, value: Any) -> "WalkContext":
        """Bind key in the innermost open node's local scope."""
        self._locals[-1][key] = value
        return self
