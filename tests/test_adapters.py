# tests/test_adapters.py
"""
Input adapters: Excel (Spanish contract) and JSON records.
"""
import json

import pandas as pd
import pytest

from hydrotopo.adapters.excel.read_excel import load_network_from_excel, read_config_sheet
from hydrotopo.adapters.json.read_json import (
    dump_network_json,
    load_network_from_json,
    network_from_json,
)
from hydrotopo.core.build.validate import validate_topology
from hydrotopo.core.models.node import ControlUnit, Hydrobody


def write_excel(path, componentes, config=None):
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame(componentes).to_excel(writer, sheet_name="componentes", index=False)
        if config is not None:
            pd.DataFrame(config).to_excel(writer, sheet_name="config", index=False)


COMPONENTES = [
    {"componente_id": "E1", "nombre": "Embalse alto", "tipo": "estanque", "alimenta_desde": None, "vierte_a": None},
    {"componente_id": "C1", "nombre": "Compuerta", "tipo": "Compuerta", "alimenta_desde": "E1", "vierte_a": "R"},
    {"componente_id": None, "nombre": None, "tipo": None, "alimenta_desde": None, "vierte_a": None},
    {"componente_id": "T1", "nombre": "", "tipo": "turbine", "alimenta_desde": "E1", "vierte_a": "R"},
    {"componente_id": "R", "nombre": "Rio", "tipo": "aguas_abajo", "alimenta_desde": None, "vierte_a": None},
]


# ═════════════════════════════════════════════════════════════════
#  EXCEL
# ═════════════════════════════════════════════════════════════════

def test_load_excel(tmp_path):
    path = tmp_path / "topo.xlsx"
    write_excel(path, COMPONENTES, config=[
        {"clave": "DPI", "valor": "200"},
        {"clave": "titulo", "valor": "Central"},
        {"clave": "vacio", "valor": None},
    ])

    network, cfg = load_network_from_excel(str(path))

    assert [n.id for n in network] == ["E1", "C1", "T1", "R"]
    assert [n.type for n in network] == ["reservoir", "gate", "turbine", "downstream"]
    assert isinstance(network.nodes[0], Hydrobody)
    c1 = network.nodes[1]
    assert isinstance(c1, ControlUnit)
    assert (c1.feeds_from, c1.spills_to) == ("E1", "R")
    # empty name falls back to id
    assert network.nodes[2].name == "T1"

    assert cfg == {"dpi": 200.0, "titulo": "Central"}
    assert validate_topology(network).valid


def test_load_excel_without_config_sheet(tmp_path):
    path = tmp_path / "topo.xlsx"
    write_excel(path, COMPONENTES)
    _, cfg = load_network_from_excel(str(path))
    assert cfg == {}


def test_load_excel_keeps_unconnected_units(tmp_path):
    path = tmp_path / "topo.xlsx"
    write_excel(path, [
        {"componente_id": "E1", "nombre": "E1", "tipo": "estanque", "alimenta_desde": None, "vierte_a": None},
        {"componente_id": "C1", "nombre": "C1", "tipo": "compuerta", "alimenta_desde": "E1", "vierte_a": None},
        {"componente_id": "R", "nombre": "R", "tipo": "aguas_abajo", "alimenta_desde": None, "vierte_a": None},
    ])
    network, _ = load_network_from_excel(str(path))
    assert network.nodes[1].spills_to is None
    assert validate_topology(network).reason == "unit-not-connected"


def test_load_excel_numeric_ids(tmp_path):
    path = tmp_path / "topo.xlsx"
    write_excel(path, [
        {"componente_id": 1, "nombre": "E", "tipo": "estanque", "alimenta_desde": None, "vierte_a": None},
        {"componente_id": 2, "nombre": "C", "tipo": "compuerta", "alimenta_desde": 1, "vierte_a": 3},
        {"componente_id": 3, "nombre": "R", "tipo": "aguas_abajo", "alimenta_desde": None, "vierte_a": None},
    ])
    network, _ = load_network_from_excel(str(path))
    assert [n.id for n in network] == ["1", "2", "3"]
    assert (network.nodes[1].feeds_from, network.nodes[1].spills_to) == ("1", "3")
    assert validate_topology(network).valid


def test_load_excel_rejects_unknown_type(tmp_path):
    path = tmp_path / "topo.xlsx"
    write_excel(path, [
        {"componente_id": "B1", "nombre": "Bomba", "tipo": "bomba", "alimenta_desde": None, "vierte_a": None},
    ])
    with pytest.raises(ValueError, match="Invalid tipo"):
        load_network_from_excel(str(path))


def test_load_excel_missing_columns(tmp_path):
    path = tmp_path / "topo.xlsx"
    write_excel(path, [{"componente_id": "E1", "nombre": "E1"}])
    with pytest.raises(ValueError, match="missing required columns"):
        load_network_from_excel(str(path))


def test_load_excel_missing_sheet(tmp_path):
    path = tmp_path / "other.xlsx"
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame({"a": [1]}).to_excel(writer, sheet_name="otra", index=False)
    with pytest.raises(ValueError, match="no sheet 'componentes'"):
        load_network_from_excel(str(path))


def test_read_config_sheet_keeps_text_values():
    df = pd.DataFrame({"clave": ["Mostrar_Nombres", "", "cell_w"], "valor": ["no", "x", 2.5]})
    assert read_config_sheet(df) == {"mostrar_nombres": "no", "cell_w": 2.5}


# ═════════════════════════════════════════════════════════════════
#  JSON
# ═════════════════════════════════════════════════════════════════

RECORDS = [
    {"id": "R1", "name": "R1", "type": "reservoir"},
    {"id": "G1", "name": "G1", "type": "gate", "feedsFrom": "R1", "spillsTo": "D1"},
    {"id": "D1", "name": "D1", "type": "downstream"},
]


def test_network_from_json_list():
    network = network_from_json(json.dumps(RECORDS))
    assert [n.id for n in network] == ["R1", "G1", "D1"]


def test_network_from_json_object():
    network = network_from_json(json.dumps({"components": RECORDS}))
    assert len(network) == 3


@pytest.mark.parametrize("text", ["{not json", '{"nodes": []}', "[1, 2]"])
def test_network_from_json_rejects_bad_payload(text):
    with pytest.raises(ValueError):
        network_from_json(text)


def test_json_file_roundtrip(tmp_path):
    path = tmp_path / "topo.json"
    dump_network_json(network_from_json(json.dumps(RECORDS)), path)
    assert json.loads(path.read_text(encoding="utf-8")) == RECORDS
    assert load_network_from_json(path).to_records() == RECORDS
