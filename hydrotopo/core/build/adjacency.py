from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple

from hydrotopo.core.models.network import Network
from hydrotopo.core.models.node import ControlUnit, Node


@dataclass(frozen=True)
class NodeAdjacency:
    node: Node
    # children, drawn one row below
    spills_to_list: Tuple[str, ...]
    # parents; empty means the node is a root
    feeds_from_list: Tuple[str, ...]

    @property
    def id(self) -> str:
        return self.node.id

    @property
    def is_root(self) -> bool:
        return not self.feeds_from_list


def derive_adjacency(network: Network) -> Tuple[NodeAdjacency, ...]:
    """
    One NodeAdjacency per node, same order as network.nodes.

    spills_to_list:
      ids of control units feeding from this node (list order),
      then the node's own spills_to if it is a control unit (deduplicated)
    feeds_from_list:
      ids of control units spilling into this node (list order),
      then the node's own feeds_from if it is a control unit (deduplicated)
    """
    units = network.control_units()

    fed_by: Dict[str, List[str]] = {}
    spilled_by: Dict[str, List[str]] = {}
    for u in units:
        if u.feeds_from:
            fed_by.setdefault(u.feeds_from, []).append(u.id)
        if u.spills_to:
            spilled_by.setdefault(u.spills_to, []).append(u.id)

    out: List[NodeAdjacency] = []
    for n in network.nodes:
        children = list(fed_by.get(n.id, []))
        parents = list(spilled_by.get(n.id, []))
        if isinstance(n, ControlUnit):
            if n.spills_to and n.spills_to not in children:
                children.append(n.spills_to)
            if n.feeds_from and n.feeds_from not in parents:
                parents.append(n.feeds_from)
        out.append(NodeAdjacency(
            node=n,
            spills_to_list=tuple(children),
            feeds_from_list=tuple(parents),
        ))
    return tuple(out)
