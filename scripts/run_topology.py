import argparse
import logging
import os

from hydrotopo.adapters.excel.read_excel import load_network_from_excel
from hydrotopo.adapters.json.read_json import load_network_from_json
from hydrotopo.core.build.config import TopologyConfig
from hydrotopo.core.build.validate import validate_topology, raise_on_invalid, reason_to_readable
from hydrotopo.core.build.layout import compute_layout
from hydrotopo.core.postprocess.export import export_layout_csv, export_layout_excel
from hydrotopo.core.postprocess.plots import plot_topology


# ============================================================
# INPUTS
# ============================================================

parser = argparse.ArgumentParser(description="Validate and lay out a hydro topology.")
parser.add_argument("input", help="Excel (.xlsx) or JSON (.json) topology")
parser.add_argument("--out", default=None, help="output folder (overrides config 'out_folder')")
parser.add_argument("-v", "--verbose", action="store_true")
args = parser.parse_args()

logging.basicConfig(
    level=logging.DEBUG if args.verbose else logging.INFO,
    format="%(levelname)s %(name)s: %(message)s",
)

# --- Leer entrada
if args.input.lower().endswith(".json"):
    net, cfg = load_network_from_json(args.input), {}
else:
    net, cfg = load_network_from_excel(args.input)

cfg_model = TopologyConfig.from_dict(cfg)
out_folder = args.out or cfg_model.run.out_folder
os.makedirs(out_folder, exist_ok=True)

# ============================================================
# VALIDACION
# ============================================================

result = validate_topology(net)
print("VALIDATION:", result.to_dict())
if not result.valid:
    print(reason_to_readable(result.reason))
    if cfg_model.run.require_valid:
        raise_on_invalid(result)

# ============================================================
# LAYOUT
# ============================================================

layout = compute_layout(net)
print(f"LAYOUT OK: {len(layout.nodes)} nodes, {len(layout.connectors)} connectors")

clashes = layout.overlapping()
if clashes:
    print("WARNING overlapping cells:", clashes)

# ============================================================
# EXPORTS
# ============================================================

export_layout_csv(
    layout,
    os.path.join(out_folder, "layout_nodos.csv"),
    os.path.join(out_folder, "layout_conexiones.csv"),
)
export_layout_excel(layout, os.path.join(out_folder, "layout.xlsx"))
plot_topology(layout, os.path.join(out_folder, "topologia.png"), cfg_model.plot)

print("EXPORT OK ->", out_folder)
