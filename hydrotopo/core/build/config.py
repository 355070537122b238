# hydrotopo/core/build/config.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


def _as_bool(x: Any) -> bool:
    if isinstance(x, str):
        return x.strip().lower() in ("1", "true", "yes", "si", "sí", "y")
    return bool(x)


# ============================================================
# PlotConfig (render del grafo)
# ============================================================

@dataclass(frozen=True)
class PlotConfig:
    """
    Render settings for plot_topology.
    cell_w/cell_h are inches per grid cell.
    """
    cell_w: float = 1.2
    cell_h: float = 1.0
    dpi: int = 150
    show_names: bool = True
    title: str = ""

    @staticmethod
    def from_dict(cfg: Dict[str, Any]) -> "PlotConfig":
        cell_w = cfg.get("cell_w", cfg.get("plot_cell_w", cfg.get("ancho_celda", 1.2)))
        cell_h = cfg.get("cell_h", cfg.get("plot_cell_h", cfg.get("alto_celda", 1.0)))
        dpi = cfg.get("dpi", cfg.get("plot_dpi", 150))
        show_names = cfg.get("show_names", cfg.get("mostrar_nombres", True))
        title = cfg.get("title", cfg.get("titulo", ""))

        out = PlotConfig(
            cell_w=float(cell_w),
            cell_h=float(cell_h),
            dpi=int(dpi),
            show_names=_as_bool(show_names),
            title=str(title or "").strip(),
        )
        out.validate()
        return out

    def validate(self) -> None:
        if self.cell_w <= 0 or self.cell_h <= 0:
            raise ValueError(f"PlotConfig cell size must be > 0 (got {self.cell_w} x {self.cell_h})")
        if self.dpi <= 0:
            raise ValueError(f"PlotConfig.dpi must be > 0 (got {self.dpi})")


# ============================================================
# RunConfig
# ============================================================

@dataclass(frozen=True)
class RunConfig:
    """
    Driver settings.
    require_valid: stop before layout if the topology breaks a rule.
    """
    require_valid: bool = False
    out_folder: str = "out"

    @staticmethod
    def from_dict(cfg: Dict[str, Any]) -> "RunConfig":
        require_valid = cfg.get("require_valid", cfg.get("exigir_valido", False))
        out_folder = cfg.get("out_folder", cfg.get("carpeta_salida", "out"))

        out = RunConfig(
            require_valid=_as_bool(require_valid),
            out_folder=str(out_folder or "").strip(),
        )
        out.validate()
        return out

    def validate(self) -> None:
        if not self.out_folder:
            raise ValueError("RunConfig.out_folder must not be empty")


# ============================================================
# TopologyConfig (agregador)
# ============================================================

@dataclass(frozen=True)
class TopologyConfig:
    run: RunConfig
    plot: PlotConfig
    version: int = 1

    @staticmethod
    def from_dict(cfg: Dict[str, Any]) -> "TopologyConfig":
        out = TopologyConfig(
            run=RunConfig.from_dict(cfg),
            plot=PlotConfig.from_dict(cfg),
            version=int(cfg.get("config_version", cfg.get("version", 1))),
        )
        out.validate()
        return out

    def validate(self) -> None:
        if self.version <= 0:
            raise ValueError(f"TopologyConfig.version must be > 0 (got {self.version})")
        self.run.validate()
        self.plot.validate()
