from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from .node import (
    ControlUnit,
    Node,
    NodeType,
    find_by_id,
    is_control_unit,
    node_from_dict,
    node_to_dict,
)


@dataclass(frozen=True, slots=True)
class Network:
    """
    Canonical topology container (core model).

    Nodes are kept in insertion order. Order has no meaning for the
    topology itself, but every first-match lookup and every list-scoped
    rule scans in this order.
    """
    nodes: Tuple[Node, ...] = field(default_factory=tuple)

    @staticmethod
    def from_records(records: Iterable[Dict[str, Any]]) -> "Network":
        return Network(nodes=tuple(node_from_dict(r) for r in records))

    def to_records(self) -> List[Dict[str, Any]]:
        return [node_to_dict(n) for n in self.nodes]

    def __iter__(self) -> Iterator[Node]:
        return iter(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)

    def find(self, node_id: Optional[str]) -> Optional[Node]:
        return find_by_id(self.nodes, node_id)

    def control_units(self) -> List[ControlUnit]:
        return [n for n in self.nodes if is_control_unit(n)]  # type: ignore[misc]

    def of_type(self, node_type: NodeType) -> List[Node]:
        return [n for n in self.nodes if n.type == node_type]
