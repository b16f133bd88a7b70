"""List continuation: decide whether a list block extends the open list"""

from typing import NamedTuple, Optional

from blockmd.core.mdast import List, MdNode
from blockmd.core.models import ListProps


LIST_PARENT_KEY = "affine:list:parent"


class ListSignature(NamedTuple):
    ordered: bool
    todo: bool


def checked_of(props: ListProps) -> Optional[bool]:
    """Checked state for a list item; None unless the item is a todo."""
    return bool(props.checked) if props.type == "todo" else None


def signature_of(props: ListProps) -> ListSignature:
    return ListSignature(ordered=props.type == "numbered", todo=props.type == "todo")


def signature_of_node(node: MdNode) -> Optional[ListSignature]:
    """Signature of an open list node, read from its first item only; None for non-lists."""
    if not isinstance(node, List):
        return None
    todo = bool(node.children) and node.children[0].checked is not None
    return ListSignature(ordered=node.ordered, todo=todo)


def should_continue_list(
    parent_id: Optional[str],
    owner_id: Optional[str],
    prior: Optional[ListSignature],
    candidate: ListSignature,
    ) -> bool:
    """True when a list block under parent_id belongs in the list owned by owner_id.

    The open list must have been started by a sibling (same parent) and carry
    the same ordered flag and todo-ness as the candidate item.
    """
    if prior is None or owner_id is None:
        return False
    return owner_id == parent_id and prior == candidate
