# tests/conftest.py
"""
Shared fixtures: small ordered component lists in the external record format.
"""
import matplotlib

matplotlib.use("Agg")

import pytest

from hydrotopo.core.models.network import Network


def unit(node_id, feeds_from, spills_to, node_type="gate", name=None):
    return {
        "id": node_id,
        "name": name or node_id,
        "type": node_type,
        "feedsFrom": feeds_from,
        "spillsTo": spills_to,
    }


def body(node_id, node_type, name=None):
    return {"id": node_id, "name": name or node_id, "type": node_type}


def net(*records):
    return Network.from_records(records)


@pytest.fixture
def simple_chain() -> Network:
    """
        R1 -> G1 -> D1
    """
    return net(
        body("R1", "reservoir"),
        unit("G1", "R1", "D1"),
        body("D1", "downstream"),
    )


@pytest.fixture
def two_reservoir_plant() -> Network:
    """
        R1 -> T1 -> R2 -> G2 -> D1
        R1 -> G1 ---------------> D1
    """
    return net(
        body("R1", "reservoir", "Upper lake"),
        unit("T1", "R1", "R2", "turbine"),
        unit("G1", "R1", "D1"),
        body("R2", "reservoir", "Lower lake"),
        unit("G2", "R2", "D1"),
        body("D1", "downstream", "River"),
    )


def long_chain(n_gates):
    """
        R0 -> G0 -> R1 -> G1 -> ... -> R{n-1} -> G{n-1} -> D
    """
    records = []
    for i in range(n_gates):
        nxt = f"R{i + 1}" if i + 1 < n_gates else "D"
        records.append(body(f"R{i}", "reservoir"))
        records.append(unit(f"G{i}", f"R{i}", nxt))
    records.append(body("D", "downstream"))
    return net(*records)
