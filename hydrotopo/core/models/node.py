from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Literal, Optional, Union

HydrobodyType = Literal["reservoir", "downstream"]
ControlUnitType = Literal["turbine", "gate"]
NodeType = Literal["reservoir", "downstream", "turbine", "gate"]

HYDROBODY_TYPES = ("reservoir", "downstream")
CONTROL_UNIT_TYPES = ("turbine", "gate")
NODE_TYPES = HYDROBODY_TYPES + CONTROL_UNIT_TYPES


@dataclass(frozen=True, slots=True)
class Hydrobody:
    """
    Passive water body (core model).

    Notes:
    - reservoir: source, must feed at least one control unit
    - downstream: terminal sink, always drawn on the lowest row
    - never carries feeds_from/spills_to
    """
    id: str
    name: str
    type: HydrobodyType


@dataclass(frozen=True, slots=True)
class ControlUnit:
    """
    Active flow-control element (turbine or gate).

    Notes:
    - feeds_from: id of the upstream source (None if not wired yet)
    - spills_to: id of the downstream target (None if not wired yet)
    - references may dangle; the validator reports that as 'invalid-id'
    """
    id: str
    name: str
    type: ControlUnitType
    feeds_from: Optional[str] = None
    spills_to: Optional[str] = None


Node = Union[Hydrobody, ControlUnit]


def is_valid_type(value: Any) -> bool:
    return isinstance(value, str) and value in NODE_TYPES


def is_control_unit(node: Optional[Node]) -> bool:
    return node is not None and node.type in CONTROL_UNIT_TYPES


def is_hydrobody(node: Optional[Node]) -> bool:
    return node is not None and node.type in HYDROBODY_TYPES


def find_by_id(nodes: Iterable[Node], node_id: Optional[str]) -> Optional[Node]:
    """
    First node (list order) whose id equals node_id, or None.
    Duplicate ids are tolerated: the earliest one wins.
    """
    if not node_id:
        return None
    for n in nodes:
        if n.id == node_id:
            return n
    return None


def _ref(x: Any) -> Optional[str]:
    if x is None:
        return None
    s = str(x)
    return s if s != "" else None


def node_from_dict(record: Dict[str, Any]) -> Node:
    """
    Build a node from an external record:
      {id, name, type} or {id, name, type, feedsFrom, spillsTo}

    snake_case keys (feeds_from/spills_to) are accepted as well.
    """
    node_type = record.get("type")
    if not is_valid_type(node_type):
        raise ValueError(
            f"Invalid node type {node_type!r} (id={record.get('id')!r}). "
            f"Allowed: {list(NODE_TYPES)}"
        )

    node_id = str(record.get("id", "") or "")
    name = str(record.get("name", "") or "")

    if node_type in HYDROBODY_TYPES:
        return Hydrobody(id=node_id, name=name, type=node_type)  # type: ignore[arg-type]

    feeds_from = record.get("feedsFrom", record.get("feeds_from"))
    spills_to = record.get("spillsTo", record.get("spills_to"))
    return ControlUnit(
        id=node_id,
        name=name,
        type=node_type,  # type: ignore[arg-type]
        feeds_from=_ref(feeds_from),
        spills_to=_ref(spills_to),
    )


def node_to_dict(node: Node) -> Dict[str, Any]:
    out: Dict[str, Any] = {"id": node.id, "name": node.name, "type": node.type}
    if isinstance(node, ControlUnit):
        out["feedsFrom"] = node.feeds_from
        out["spillsTo"] = node.spills_to
    return out
