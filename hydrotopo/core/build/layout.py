from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Tuple

from hydrotopo.core.build.adjacency import NodeAdjacency, derive_adjacency
from hydrotopo.core.models.layout import Connector, PositionedNode, TopologyLayout
from hydrotopo.core.models.network import Network
from hydrotopo.core.models.node import ControlUnit

logger = logging.getLogger(__name__)

# id -> placed node, insertion order = placement order
Placement = Mapping[str, PositionedNode]


# ============================================================
# Helpers
# ============================================================

def _child_x(parent_x: int, idx: int, n_children: int) -> int:
    """
    Column of child idx under a parent.

    - parent_x > 0 (not the leftmost root): plain left-to-right stacking
    - even count: split around the parent, parent column left empty
    - odd count: middle child right under the parent
    """
    if parent_x > 0:
        return parent_x + idx
    if n_children % 2 == 0:
        half = n_children // 2
        return parent_x + idx - half + (1 if idx >= half else 0)
    return parent_x + idx - n_children // 2


def _next_column(placed: Placement) -> int:
    if not placed:
        return 0
    return max(p.x for p in placed.values()) + 1


def _place(
    adj: NodeAdjacency,
    x: int,
    y: int,
    placed: Placement,
    by_id: Mapping[str, NodeAdjacency],
) -> Placement:
    """
    Place adj at (x, y), then its children one row below (pre-order).
    Returns a new mapping; an id already placed is left where it is,
    which also ends descent on cyclic input.

    Explicit stack, so chain length is not limited by recursion depth.
    Children are pushed in reverse to pop in list order.
    """
    out: Dict[str, PositionedNode] = dict(placed)
    stack: List[Tuple[NodeAdjacency, int, int]] = [(adj, x, y)]
    while stack:
        cur, cx, cy = stack.pop()
        if cur.id in out:
            continue
        out[cur.id] = PositionedNode(node=cur.node, x=cx, y=cy)

        children = cur.spills_to_list
        for idx in reversed(range(len(children))):
            child = by_id.get(children[idx])
            if child is None:
                continue
            stack.append((child, _child_x(cx, idx, len(children)), cy + 1))
    return out


def _sink_row(placed: Placement) -> int:
    rows = [p.y for p in placed.values() if p.type != "downstream"]
    return (max(rows) if rows else 0) + 1


def _push_downstream_to_bottom(placed: Placement) -> Tuple[PositionedNode, ...]:
    row = _sink_row(placed)
    out: List[PositionedNode] = []
    for p in placed.values():
        if p.type == "downstream":
            p = PositionedNode(node=p.node, x=p.x, y=row)
        out.append(p)
    return tuple(out)


def build_connectors(positioned: Tuple[PositionedNode, ...]) -> Tuple[Connector, ...]:
    """
    One connector per control-unit reference that resolves to a placed node:
      feeds_from -> unit, then unit -> spills_to.
    Unresolved references are skipped.
    """
    by_id: Dict[str, PositionedNode] = {}
    for p in positioned:
        by_id.setdefault(p.id, p)

    out: List[Connector] = []
    for p in positioned:
        unit = p.node
        if not isinstance(unit, ControlUnit):
            continue

        src = by_id.get(unit.feeds_from) if unit.feeds_from else None
        if src is not None:
            out.append(Connector(
                from_x=src.x, from_y=src.y, to_x=p.x, to_y=p.y,
                source_id=src.id, target_id=p.id,
            ))

        dst = by_id.get(unit.spills_to) if unit.spills_to else None
        if dst is not None:
            out.append(Connector(
                from_x=p.x, from_y=p.y, to_x=dst.x, to_y=dst.y,
                source_id=p.id, target_id=dst.id,
            ))
    return tuple(out)


# ============================================================
# Public
# ============================================================

def compute_layout(network: Network) -> TopologyLayout:
    """
    Grid layout of a topology (valid or not).

    1) adjacency lists per node
    2) roots (no parents) placed left to right on row 0
    3) children placed depth-first one row below their parent
    4) downstream nodes moved to the row below everything else
    5) connectors from the final positions

    Nodes not reachable from any root are left out.
    """
    adjacency = derive_adjacency(network)

    by_id: Dict[str, NodeAdjacency] = {}
    for a in adjacency:
        by_id.setdefault(a.id, a)

    placed: Placement = {}
    for root in (a for a in adjacency if a.is_root):
        placed = _place(root, _next_column(placed), 0, placed, by_id)

    positioned = _push_downstream_to_bottom(placed)
    connectors = build_connectors(positioned)

    if len(positioned) < len(network.nodes):
        logger.debug(
            "Layout placed %d of %d nodes (unreachable from any root or duplicate ids)",
            len(positioned), len(network.nodes),
        )

    return TopologyLayout(nodes=positioned, connectors=connectors)
