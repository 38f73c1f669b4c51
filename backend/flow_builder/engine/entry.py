"""First-node policy: which single node a flow starts from."""
import logging

from ..nodes.base import NodeKind
from .errors import IneligibleNodeError
from .graph import Edge, Node

logger = logging.getLogger(__name__)


def ineligibility_reason(node: Node, edges: list[Edge]) -> str | None:
    if node.kind == NodeKind.CONDITION_CHECK:
        return "condition checks cannot be first nodes"
    if any(e.target == node.id for e in edges):
        return "node has incoming connections"
    return None


def is_eligible(node: Node, edges: list[Edge]) -> bool:
    """Only action or condition nodes without inputs can start a flow."""
    return ineligibility_reason(node, edges) is None


class EntryPolicy:
    """Holds the entry marker for one editing session.

    Eligibility is checked when the marker is set; later edge changes are
    kept from invalidating it by the connection rules, which refuse any
    edge into the entry node.
    """

    def __init__(self, entry_id: str | None = None):
        self.entry_id = entry_id

    def set_entry(self, node: Node, edges: list[Edge]) -> None:
        reason = ineligibility_reason(node, edges)
        if reason is not None:
            raise IneligibleNodeError(node.id, reason)
        self.entry_id = node.id
        logger.info("First node set to %s (%s)", node.id, node.kind.value)

    def clear_entry(self) -> None:
        if self.entry_id is not None:
            logger.info("First node %s cleared", self.entry_id)
        self.entry_id = None

    def is_entry(self, node_id: str) -> bool:
        return self.entry_id is not None and self.entry_id == node_id
