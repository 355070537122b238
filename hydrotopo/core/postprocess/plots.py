from __future__ import annotations

from typing import Dict, Optional, Tuple
import os

import numpy as np
import matplotlib.pyplot as plt

from hydrotopo.core.build.config import PlotConfig
from hydrotopo.core.models.layout import TopologyLayout

# marker, color per node type
NODE_STYLE: Dict[str, Tuple[str, str]] = {
    "reservoir": ("s", "tab:blue"),
    "downstream": ("v", "tab:cyan"),
    "turbine": ("o", "tab:orange"),
    "gate": ("D", "tab:gray"),
}


def plot_topology(
    layout: TopologyLayout,
    out_png: str,
    config: Optional[PlotConfig] = None,
) -> str:
    """
    Dibuja el layout: un marcador por nodo y una flecha por conector.
    Row 0 is drawn on top (y axis inverted).
    """
    cfg = config or PlotConfig()
    os.makedirs(os.path.dirname(out_png) or ".", exist_ok=True)

    x_min, x_max, y_min, y_max = layout.bounds()
    n_cols = x_max - x_min + 1
    n_rows = y_max - y_min + 1

    fig, ax = plt.subplots(figsize=(max(n_cols, 2) * cfg.cell_w, max(n_rows, 2) * cfg.cell_h))

    for c in layout.connectors:
        ax.annotate(
            "",
            xy=(c.to_x, c.to_y),
            xytext=(c.from_x, c.from_y),
            arrowprops=dict(arrowstyle="->", color="black", lw=1.0, shrinkA=10, shrinkB=10),
        )

    for node_type, (marker, color) in NODE_STYLE.items():
        pts = np.array([(p.x, p.y) for p in layout.nodes if p.type == node_type], dtype=float)
        if pts.size == 0:
            continue
        ax.scatter(pts[:, 0], pts[:, 1], marker=marker, s=300, c=color, label=node_type, zorder=3)

    if cfg.show_names:
        for p in layout.nodes:
            ax.annotate(p.name or p.id, (p.x, p.y), xytext=(12, -4), textcoords="offset points", fontsize=8)

    ax.set_xlim(x_min - 1, x_max + 1)
    ax.set_ylim(y_max + 1, y_min - 1)
    ax.set_xticks(range(x_min, x_max + 1))
    ax.set_yticks(range(y_min, y_max + 1))
    ax.grid(True, alpha=0.3)
    if layout.nodes:
        ax.legend(loc="upper right", fontsize=8)
    if cfg.title:
        ax.set_title(cfg.title)

    fig.tight_layout()
    fig.savefig(out_png, dpi=cfg.dpi)
    plt.close(fig)
    return out_png
