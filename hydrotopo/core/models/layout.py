from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple, Union

from .node import Node


@dataclass(frozen=True, slots=True)
class PositionedNode:
    """
    Node plus integer grid cell.
    x grows to the right, y grows downward (row 0 on top).
    """
    node: Node
    x: int
    y: int

    @property
    def id(self) -> str:
        return self.node.id

    @property
    def name(self) -> str:
        return self.node.name

    @property
    def type(self) -> str:
        return self.node.type


@dataclass(frozen=True, slots=True)
class Connector:
    """Directed edge between two placed nodes, derived from a control unit reference."""
    from_x: int
    from_y: int
    to_x: int
    to_y: int

    source_id: str = ""
    target_id: str = ""


@dataclass(frozen=True, slots=True)
class TopologyLayout:
    nodes: Tuple[PositionedNode, ...] = field(default_factory=tuple)
    connectors: Tuple[Connector, ...] = field(default_factory=tuple)

    def __iter__(self) -> Iterator[Union[Tuple[PositionedNode, ...], Tuple[Connector, ...]]]:
        # allows: positioned, connectors = layout
        yield self.nodes
        yield self.connectors

    def position_of(self, node_id: str) -> Optional[Tuple[int, int]]:
        for p in self.nodes:
            if p.id == node_id:
                return p.x, p.y
        return None

    def bounds(self) -> Tuple[int, int, int, int]:
        """(x_min, x_max, y_min, y_max); all zero for an empty layout."""
        if not self.nodes:
            return 0, 0, 0, 0
        xs = [p.x for p in self.nodes]
        ys = [p.y for p in self.nodes]
        return min(xs), max(xs), min(ys), max(ys)

    def overlapping(self) -> List[List[str]]:
        """
        Groups of node ids sharing the same (x, y).
        Only cross-subtree collisions are expected here.
        """
        by_cell: Dict[Tuple[int, int], List[str]] = {}
        for p in self.nodes:
            by_cell.setdefault((p.x, p.y), []).append(p.id)
        return [ids for ids in by_cell.values() if len(ids) > 1]
