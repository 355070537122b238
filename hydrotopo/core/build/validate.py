from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Literal, Optional, Sequence, Set, Tuple

from hydrotopo.core.models.network import Network
from hydrotopo.core.models.node import ControlUnit, Node, find_by_id, is_control_unit

logger = logging.getLogger(__name__)

Reason = Literal[
    "no-downstream",
    "unit-not-connected",
    "feeding-from-downstream",
    "reservoir-not-connected",
    "invalid-id",
    "unit-connected-to-unit",
    "closed-loop",
]

# rule order, first violation is reported
REASONS: Tuple[Reason, ...] = (
    "no-downstream",
    "unit-not-connected",
    "feeding-from-downstream",
    "reservoir-not-connected",
    "invalid-id",
    "unit-connected-to-unit",
    "closed-loop",
)

REASON_TEXT: Dict[str, str] = {
    "no-downstream": (
        'In every topology, there must exist at least one downstream (type="downstream").\n'
        "This is where water ends up spilling to at the end of a topology."
    ),
    "unit-not-connected": (
        'Every control unit (type="turbine" or type="gate") must take water from a component (feedsFrom)\n'
        "and spill its water into a component (spillsTo)."
    ),
    "feeding-from-downstream": (
        'A control unit (type="turbine" or "gate") may spill to a downstream (spillsTo === downstream.id),\n'
        "but control units may not take water from downstream (feedsFrom === downstream.id)."
    ),
    "reservoir-not-connected": (
        'Every reservoir (type="reservoir") needs to spill into a control unit (type="turbine" or "gate").\n'
        'Does not apply to type="downstream" hydrobodies.\n'
        "It is okay for a reservoir to spill into multiple control units, and for multiple control units\n"
        "to spill into the same reservoir."
    ),
    "invalid-id": (
        "The components a control unit connects to (feedsFrom, spillsTo) must be the id of another component."
    ),
    "unit-connected-to-unit": "A turbine or gate can not connect to another turbine or a gate.",
    "closed-loop": (
        'It is not allowed for a component to spill into a reservoir "above" it (e.g. A -> B -> C -> D -> A)'
    ),
}


@dataclass(frozen=True)
class TopologyResult:
    valid: bool
    reason: Optional[Reason] = None

    @staticmethod
    def ok() -> "TopologyResult":
        return TopologyResult(valid=True)

    @staticmethod
    def invalid(reason: Reason) -> "TopologyResult":
        return TopologyResult(valid=False, reason=reason)

    def __bool__(self) -> bool:
        return self.valid

    def to_dict(self) -> Dict[str, object]:
        if self.valid:
            return {"valid": True}
        return {"valid": False, "reason": self.reason}


class TopologyValidationError(ValueError):
    """Raised by raise_on_invalid when a topology breaks one of the rules."""
    def __init__(self, result: TopologyResult):
        self.result = result
        reason = result.reason or ""
        super().__init__(f"Topology validation failed ({reason}): {reason_to_readable(reason)}")


def reason_to_readable(reason: str) -> str:
    """Human-readable explanation for a reason code; unknown codes come back unchanged."""
    return REASON_TEXT.get(reason, reason)


# ============================================================
# Closed-loop walk
# ============================================================

class _ParentIndex:
    """
    Upward neighbours of a node, indexed once per validation:
      - the node a control unit feeds from (first match by id)
      - every control unit spilling into this node (list order)
    """
    def __init__(self, nodes: Sequence[Node], units: Sequence[ControlUnit]):
        self._first: Dict[str, Node] = {}
        for n in nodes:
            self._first.setdefault(n.id, n)
        self._spilled_into: Dict[str, List[ControlUnit]] = {}
        for u in units:
            if u.spills_to:
                self._spilled_into.setdefault(u.spills_to, []).append(u)

    def parents(self, node: Node) -> List[Node]:
        out: List[Node] = []
        if isinstance(node, ControlUnit) and node.feeds_from:
            up = self._first.get(node.feeds_from)
            if up is not None:
                out.append(up)
        out.extend(self._spilled_into.get(node.id, []))
        return out


def _has_closed_loop_above(start: Node, index: _ParentIndex) -> bool:
    """
    DFS over parents with an explicit stack. The reservoir and node-id
    sets hold the current path only: entries are removed again when the
    walk backs out, so a reservoir shared by two separate paths is fine.
    Path-local node ids stop cycles that contain no reservoir.
    """
    reservoirs: Set[str] = set()
    path: Set[str] = set()
    # (node, leaving): leaving=True pops the node off the current path
    stack: List[Tuple[Node, bool]] = [(start, False)]
    while stack:
        cur, leaving = stack.pop()
        if leaving:
            path.discard(cur.id)
            reservoirs.discard(cur.id)
            continue

        if cur.type == "reservoir":
            if cur.id in reservoirs:
                return True
            reservoirs.add(cur.id)
        elif cur.id in path:
            continue
        path.add(cur.id)

        stack.append((cur, True))
        for parent in reversed(index.parents(cur)):
            stack.append((parent, False))
    return False


# ============================================================
# Rules
# ============================================================

def validate_topology(network: Network) -> TopologyResult:
    """
    Check a topology against the seven rules, in order.
    Returns the first violated rule as TopologyResult.invalid(reason),
    or TopologyResult.ok(). Never raises for a well-typed network.
    """
    nodes = network.nodes
    units = network.control_units()

    # Rule 1
    if not network.of_type("downstream"):
        return _fail("no-downstream")

    # Rule 2
    for u in units:
        if not u.feeds_from or not u.spills_to:
            logger.debug("Control unit %r is missing feeds_from/spills_to", u.id)
            return _fail("unit-not-connected")

    # Rule 3
    for u in units:
        src = find_by_id(nodes, u.feeds_from)
        if src is not None and src.type == "downstream":
            logger.debug("Control unit %r feeds from downstream %r", u.id, src.id)
            return _fail("feeding-from-downstream")

    # Rule 4 (only feeds_from counts, spills_to into a reservoir does not)
    fed_from = {u.feeds_from for u in units}
    for n in network.of_type("reservoir"):
        if n.id not in fed_from:
            logger.debug("Reservoir %r feeds no control unit", n.id)
            return _fail("reservoir-not-connected")

    # Rule 5
    for u in units:
        if find_by_id(nodes, u.feeds_from) is None or find_by_id(nodes, u.spills_to) is None:
            logger.debug("Control unit %r references an unknown id", u.id)
            return _fail("invalid-id")

    # Rule 6
    for u in units:
        if is_control_unit(find_by_id(nodes, u.feeds_from)) or is_control_unit(find_by_id(nodes, u.spills_to)):
            logger.debug("Control unit %r is wired to another control unit", u.id)
            return _fail("unit-connected-to-unit")

    # Rule 7
    index = _ParentIndex(nodes, units)
    for n in nodes:
        if _has_closed_loop_above(n, index):
            logger.debug("Closed loop found above %r", n.id)
            return _fail("closed-loop")

    return TopologyResult.ok()


def _fail(reason: Reason) -> TopologyResult:
    logger.info("Topology invalid: %s", reason)
    return TopologyResult.invalid(reason)


def raise_on_invalid(result: TopologyResult) -> None:
    if not result.valid:
        raise TopologyValidationError(result)
