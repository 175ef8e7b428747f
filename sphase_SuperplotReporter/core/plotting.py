# sphase_SuperplotReporter/core/plotting.py
from __future__ import annotations
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Literal
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from scipy.stats import gaussian_kde

LayerKind = Literal["density", "points", "lines", "violin", "dothist"]


# ---------- plot specification (immutable) ----------
@dataclass(frozen=True)
class Layer:
    kind: LayerKind
    table: str = "observations"      # key into the tables passed to render()
    x: str | None = None
    y: str | None = None
    hue: str | None = None
    by: str | None = None            # lines: column linking paired points
    options: tuple[tuple[str, Any], ...] = ()

    def opt(self, name: str, default=None):
        return dict(self.options).get(name, default)


@dataclass(frozen=True)
class PlotSpec:
    title: str
    x_label: str = ""
    y_label: str = ""
    facet_row: str | None = None
    facet_col: str | None = None
    layers: tuple[Layer, ...] = field(default_factory=tuple)

    def add(self, layer: Layer) -> "PlotSpec":
        return replace(self, layers=self.layers + (layer,))

    def facet(self, row: str | None = None, col: str | None = None) -> "PlotSpec":
        return replace(self, facet_row=row, facet_col=col)

    def labels(self, x: str | None = None, y: str | None = None) -> "PlotSpec":
        return replace(self,
                       x_label=self.x_label if x is None else x,
                       y_label=self.y_label if y is None else y)


def layer(kind: LayerKind, table: str = "observations", **kw) -> Layer:
    fields = {k: kw.pop(k) for k in ("x", "y", "hue", "by") if k in kw}
    return Layer(kind=kind, table=table, options=tuple(sorted(kw.items())), **fields)


# ---------- the five report figures ----------
def density_by_method() -> PlotSpec:
    return (PlotSpec("S-phase distribution per method")
            .facet(col="method")
            .labels(x="S-phase [%]", y="density")
            .add(layer("density", x="value", hue="method")))


def paired_by_year() -> PlotSpec:
    return (PlotSpec("Manual vs automated per submission")
            .facet(col="year")
            .labels(x="method", y="S-phase [%]")
            .add(layer("lines", x="method", y="value", by="submission", alpha=0.3))
            .add(layer("points", x="method", y="value", hue="method")))


def superplot() -> PlotSpec:
    return (PlotSpec("Superplot: technical replicates and replicate means")
            .facet(row="method", col="year")
            .labels(x="group", y="S-phase [%]")
            .add(layer("points", x="group", y="value", hue="group", jitter=0.15, size=12, alpha=0.5))
            .add(layer("points", table="replicates", x="group", y="percentage", hue="group",
                       size=80, edgecolor="black")))


def replicate_violin() -> PlotSpec:
    return (PlotSpec("Manual S-phase per independent replicate")
            .labels(x="replicate", y="S-phase [%]")
            .add(layer("violin", table="ground_truth", x="replicate", y="value"))
            .add(layer("points", table="ground_truth", x="replicate", y="value", jitter=0.1, size=10)))


def replicate_dothist(binwidth: float = 2.5) -> PlotSpec:
    return (PlotSpec("Replicate-level S-phase (manual)")
            .labels(x="S-phase [%]", y="replicates")
            .add(layer("dothist", table="summary", x="percentage", hue="year", binwidth=binwidth)))


REPORT_FIGURES: tuple[tuple[str, Any], ...] = (
    ("density_by_method.png", density_by_method),
    ("paired_by_year.png", paired_by_year),
    ("superplot.png", superplot),
    ("replicate_violin.png", replicate_violin),
    ("replicate_dothist.png", replicate_dothist),
)


# ---------- rendering ----------
def _levels(tables: dict[str, pd.DataFrame], spec: PlotSpec, column: str | None) -> list:
    if column is None:
        return [None]
    vals = set()
    for lyr in spec.layers:
        df = tables.get(lyr.table)
        if df is not None and column in df.columns:
            vals.update(df[column].dropna().tolist())
    return sorted(vals, key=str) or [None]


def _subset(df: pd.DataFrame, column: str | None, level) -> pd.DataFrame:
    if column is None or level is None or column not in df.columns:
        return df
    return df.loc[df[column] == level]


def _palette(levels: list) -> dict:
    colors = plt.rcParams["axes.prop_cycle"].by_key()["color"]
    return {lv: colors[i % len(colors)] for i, lv in enumerate(levels)}


class _Scale:
    """Shared categorical x positions and hue colours across all panels."""

    def __init__(self, tables: dict[str, pd.DataFrame], spec: PlotSpec):
        self.categories: dict[str, dict] = {}
        hues = set()
        for lyr in spec.layers:
            df = tables.get(lyr.table)
            if df is None:
                continue
            if lyr.x and lyr.x in df.columns and not pd.api.types.is_float_dtype(df[lyr.x]) \
                    and lyr.kind != "density":
                cats = self.categories.setdefault(lyr.x, {})
                for v in sorted(df[lyr.x].dropna().unique().tolist(), key=str):
                    cats.setdefault(v, len(cats))
            if lyr.hue and lyr.hue in df.columns:
                hues.update(df[lyr.hue].dropna().tolist())
        self.colors = _palette(sorted(hues, key=str))

    def xpos(self, column: str, values: pd.Series) -> np.ndarray:
        cats = self.categories.get(column)
        if cats is None:
            return values.to_numpy(dtype=float)
        return values.map(cats).to_numpy(dtype=float)

    def color(self, level):
        return self.colors.get(level, "0.3")


def _draw_density(ax, df: pd.DataFrame, lyr: Layer, scale: _Scale) -> None:
    groups = df.groupby(lyr.hue) if lyr.hue else [(None, df)]
    for level, part in groups:
        vals = part[lyr.x].to_numpy(dtype=float)
        if np.unique(vals).size < 2:
            continue
        grid = np.linspace(0.0, 100.0, 400)
        ax.fill_between(grid, gaussian_kde(vals)(grid), alpha=0.35, color=scale.color(level),
                        label=None if level is None else str(level))


def _draw_points(ax, df: pd.DataFrame, lyr: Layer, scale: _Scale, rng: np.random.Generator) -> None:
    x = scale.xpos(lyr.x, df[lyr.x])
    jitter = float(lyr.opt("jitter", 0.0))
    if jitter:
        x = x + rng.uniform(-jitter, jitter, size=x.size)
    colors = [scale.color(v) for v in df[lyr.hue]] if lyr.hue else "0.3"
    ax.scatter(x, df[lyr.y].to_numpy(dtype=float), c=colors,
               s=float(lyr.opt("size", 20)), alpha=float(lyr.opt("alpha", 1.0)),
               edgecolors=lyr.opt("edgecolor", "none"), zorder=3)


def _draw_lines(ax, df: pd.DataFrame, lyr: Layer, scale: _Scale) -> None:
    for _, part in df.groupby(lyr.by):
        if len(part) < 2:
            continue
        part = part.assign(_x=scale.xpos(lyr.x, part[lyr.x])).sort_values("_x")
        ax.plot(part["_x"], part[lyr.y].to_numpy(dtype=float), color="0.5",
                alpha=float(lyr.opt("alpha", 0.5)), linewidth=0.8, zorder=2)


def _draw_violin(ax, df: pd.DataFrame, lyr: Layer, scale: _Scale) -> None:
    data, pos = [], []
    for level, part in df.groupby(lyr.x):
        vals = part[lyr.y].to_numpy(dtype=float)
        if np.unique(vals).size < 2:
            continue
        data.append(vals)
        pos.append(scale.categories[lyr.x][level])
    if data:
        ax.violinplot(data, positions=pos, showextrema=False, widths=0.8)


def _draw_dothist(ax, df: pd.DataFrame, lyr: Layer, scale: _Scale) -> None:
    if df.empty:
        return
    w = float(lyr.opt("binwidth", 2.5))
    work = df.sort_values([lyr.hue, lyr.x] if lyr.hue else [lyr.x])
    centers = (np.floor(work[lyr.x].to_numpy(dtype=float) / w) + 0.5) * w
    heights: dict[float, int] = {}
    ys = []
    for c in centers:
        heights[c] = heights.get(c, 0) + 1
        ys.append(heights[c])
    colors = [scale.color(v) for v in work[lyr.hue]] if lyr.hue else "0.3"
    ax.scatter(centers, ys, c=colors, s=60, edgecolors="black", zorder=3)
    if lyr.hue:
        for level in work[lyr.hue].drop_duplicates():
            ax.scatter([], [], color=scale.color(level), edgecolors="black", label=str(level))
    ax.set_ylim(0, max(ys) + 1)


def render(spec: PlotSpec, tables: dict[str, pd.DataFrame], out_path: Path,
           dpi: int = 160, seed: int = 0) -> Path | None:
    """Draw a PlotSpec against named tables and save it; None when there is nothing to draw."""
    if all(tables.get(l.table) is None or tables[l.table].empty for l in spec.layers):
        print(f"[INFO] {spec.title}: no data; skipping.")
        return None

    rows = _levels(tables, spec, spec.facet_row)
    cols = _levels(tables, spec, spec.facet_col)
    scale = _Scale(tables, spec)
    rng = np.random.default_rng(seed)

    fig, axes = plt.subplots(len(rows), len(cols), squeeze=False, sharey=True,
                             figsize=(4.0 * len(cols) + 1.5, 3.5 * len(rows) + 1.0))
    for i, rv in enumerate(rows):
        for j, cv in enumerate(cols):
            ax = axes[i][j]
            for lyr in spec.layers:
                df = tables.get(lyr.table)
                if df is None:
                    continue
                df = _subset(_subset(df, spec.facet_row, rv), spec.facet_col, cv)
                if df.empty:
                    continue
                if lyr.kind == "density":
                    _draw_density(ax, df, lyr, scale)
                elif lyr.kind == "points":
                    _draw_points(ax, df, lyr, scale, rng)
                elif lyr.kind == "lines":
                    _draw_lines(ax, df, lyr, scale)
                elif lyr.kind == "violin":
                    _draw_violin(ax, df, lyr, scale)
                elif lyr.kind == "dothist":
                    _draw_dothist(ax, df, lyr, scale)
                else:
                    raise ValueError(f"unknown layer kind: {lyr.kind}")

            for column, cats in scale.categories.items():
                if any(l.x == column for l in spec.layers):
                    ax.set_xticks(list(cats.values()))
                    ax.set_xticklabels([str(c) for c in cats], rotation=45, ha="right", fontsize=8)
                    break
            heading = " / ".join(str(v) for v in (rv, cv) if v is not None)
            if heading:
                ax.set_title(heading, fontsize=9)
            ax.grid(True, alpha=0.3)
            if i == len(rows) - 1:
                ax.set_xlabel(spec.x_label)
            if j == 0:
                ax.set_ylabel(spec.y_label)
            if ax.get_legend_handles_labels()[0]:
                ax.legend(fontsize=7, frameon=False)

    fig.suptitle(spec.title)
    fig.tight_layout()
    out_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out_path, dpi=dpi)
    plt.close(fig)
    print(f"[OK] {spec.title} → {out_path}")
    return out_path


def save_report_plots(tables: dict[str, pd.DataFrame], out_dir: Path, dpi: int = 160) -> list[Path]:
    written = []
    for file_name, build in REPORT_FIGURES:
        path = render(build(), tables, out_dir / file_name, dpi=dpi)
        if path is not None:
            written.append(path)
    return written
