from __future__ import annotations

from typing import Tuple

import pandas as pd

from hydrotopo.core.models.layout import TopologyLayout
from hydrotopo.core.models.node import ControlUnit

NODE_COLUMNS = ["id", "name", "type", "x", "y", "feeds_from", "spills_to"]
CONNECTOR_COLUMNS = ["source_id", "target_id", "from_x", "from_y", "to_x", "to_y"]


def layout_nodes_frame(layout: TopologyLayout) -> pd.DataFrame:
    """
    One row per positioned node, placement order.
    Columns:
      id, name, type, x, y, feeds_from, spills_to
    """
    rows = []
    for p in layout.nodes:
        unit = p.node if isinstance(p.node, ControlUnit) else None
        rows.append({
            "id": p.id,
            "name": p.name,
            "type": p.type,
            "x": p.x,
            "y": p.y,
            "feeds_from": unit.feeds_from if unit else None,
            "spills_to": unit.spills_to if unit else None,
        })
    return pd.DataFrame(rows, columns=NODE_COLUMNS)


def layout_connectors_frame(layout: TopologyLayout) -> pd.DataFrame:
    rows = [{
        "source_id": c.source_id,
        "target_id": c.target_id,
        "from_x": c.from_x,
        "from_y": c.from_y,
        "to_x": c.to_x,
        "to_y": c.to_y,
    } for c in layout.connectors]
    return pd.DataFrame(rows, columns=CONNECTOR_COLUMNS)


def export_layout_csv(
    layout: TopologyLayout,
    path_nodes_csv: str,
    path_connectors_csv: str,
) -> Tuple[str, str]:
    """
    Export positioned nodes and connectors to two CSV files.
    """
    layout_nodes_frame(layout).to_csv(path_nodes_csv, index=False)
    layout_connectors_frame(layout).to_csv(path_connectors_csv, index=False)
    return path_nodes_csv, path_connectors_csv


def export_layout_excel(
    layout: TopologyLayout,
    path_xlsx: str,
    nodes_sheet: str = "nodos",
    connectors_sheet: str = "conexiones",
) -> None:
    """
    Export positioned nodes and connectors to one Excel file, one sheet each.
    """
    with pd.ExcelWriter(path_xlsx, engine="openpyxl") as writer:
        layout_nodes_frame(layout).to_excel(writer, sheet_name=nodes_sheet, index=False)
        layout_connectors_frame(layout).to_excel(writer, sheet_name=connectors_sheet, index=False)
