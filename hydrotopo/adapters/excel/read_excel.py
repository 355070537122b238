from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from hydrotopo.core.models.network import Network
from hydrotopo.core.models.node import ControlUnit, Hydrobody, Node, NODE_TYPES

logger = logging.getLogger(__name__)


# -----------------------------
# Excel contract (Spanish)
# -----------------------------
SHEET_COMPONENTES = "componentes"
SHEET_CONFIG = "config"

# Required columns (snake_case)
REQ_COMPONENTES = {"componente_id", "nombre", "tipo"}
OPT_COMPONENTES = {"alimenta_desde", "vierte_a"}
REQ_CONFIG = {"clave", "valor"}

# Mappings: Spanish -> Core (English). English names pass through.
TYPE_MAP = {
    "estanque": "reservoir",
    "embalse": "reservoir",
    "aguas_abajo": "downstream",
    "descarga": "downstream",
    "turbina": "turbine",
    "compuerta": "gate",
}
TYPE_MAP.update({t: t for t in NODE_TYPES})


def _norm_str(x: Any) -> str:
    if x is None or (isinstance(x, float) and pd.isna(x)):
        return ""
    if isinstance(x, float) and x.is_integer():
        # ids typed as numbers come back from Excel as 1.0
        return str(int(x))
    return str(x).strip()


def _norm_lower(x: Any) -> str:
    return _norm_str(x).lower()


def _maybe_ref(x: Any) -> Optional[str]:
    s = _norm_str(x)
    return s or None


def _require_columns(df: pd.DataFrame, required: set[str], sheet: str) -> None:
    missing = sorted(list(required - set(df.columns)))
    if missing:
        raise ValueError(f"Sheet '{sheet}' is missing required columns: {missing}")


def read_config_sheet(df_config: pd.DataFrame) -> Dict[str, Any]:
    """
    'clave'/'valor' rows -> dict (keys lowercased, numeric strings coerced to float,
    empty values skipped).
    """
    _require_columns(df_config, REQ_CONFIG, SHEET_CONFIG)

    config: Dict[str, Any] = {}
    for _, r in df_config.iterrows():
        key = _norm_lower(r["clave"])
        if not key:
            continue
        val = r["valor"]

        if isinstance(val, str):
            v = val.strip()
            if v == "":
                continue
            try:
                config[key] = float(v)
            except ValueError:
                config[key] = v
            continue

        if isinstance(val, float) and pd.isna(val):
            continue

        config[key] = val
    return config


def read_components_sheet(df: pd.DataFrame) -> List[Node]:
    """
    One node per non-blank row, in sheet order.
    Duplicate ids are kept (lookups use the first one).
    """
    _require_columns(df, REQ_COMPONENTES, SHEET_COMPONENTES)

    nodes: List[Node] = []
    for idx, r in df.iterrows():
        comp_id = _norm_str(r["componente_id"])
        tipo_sp = _norm_lower(r["tipo"])
        if not comp_id and not tipo_sp:
            continue  # allow blank rows

        if tipo_sp not in TYPE_MAP:
            raise ValueError(
                f"Invalid tipo in '{SHEET_COMPONENTES}' (componente_id={comp_id}, row={idx}): "
                f"{tipo_sp!r}. Allowed: {sorted(TYPE_MAP.keys())}"
            )
        node_type = TYPE_MAP[tipo_sp]
        name = _norm_str(r["nombre"]) or comp_id

        if node_type in ("reservoir", "downstream"):
            if _maybe_ref(r.get("alimenta_desde")) or _maybe_ref(r.get("vierte_a")):
                logger.warning(
                    "Ignoring alimenta_desde/vierte_a on %s '%s' (only turbines and gates connect)",
                    node_type, comp_id,
                )
            nodes.append(Hydrobody(id=comp_id, name=name, type=node_type))  # type: ignore[arg-type]
            continue

        nodes.append(ControlUnit(
            id=comp_id,
            name=name,
            type=node_type,  # type: ignore[arg-type]
            feeds_from=_maybe_ref(r.get("alimenta_desde")),
            spills_to=_maybe_ref(r.get("vierte_a")),
        ))
    return nodes


def load_network_from_excel(path: str) -> Tuple[Network, Dict[str, Any]]:
    """
    Reads 'componentes' and (optionally) 'config' from an Excel file (Spanish contract)
    and returns:
      - Network (canonical core model, in English)
      - config dict from 'config' sheet ({} if the sheet is absent)
    """
    sheets = pd.read_excel(path, sheet_name=None, engine="openpyxl", dtype=object)
    if SHEET_COMPONENTES not in sheets:
        raise ValueError(f"Excel file '{path}' has no sheet '{SHEET_COMPONENTES}'")

    nodes = read_components_sheet(sheets[SHEET_COMPONENTES])
    config = read_config_sheet(sheets[SHEET_CONFIG]) if SHEET_CONFIG in sheets else {}

    logger.info("Loaded %d components from %s", len(nodes), path)
    return Network(nodes=tuple(nodes)), config
