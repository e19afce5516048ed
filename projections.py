# projections.py
# Turn the dataset + a selection into what the charts and the map draw.

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd
from plotly.colors import find_intermediate_color, hex_to_rgb

from dashboard_errors import NoDataForYearError, NoMatchingRowError
from risk_data import ENTITY_KEY, Dataset, DatasetIndexer

DEFAULT_GRADIENT = ("#ffc0cb", "#ff00ff", "#ff0000")


def format_value(v):
    """Tooltip text for a value: whole numbers without decimals, NaN spelled out."""
    if v is None or (isinstance(v, float) and math.isnan(v)):
        return "NaN"
    v = float(v)
    if v.is_integer():
        return f"{int(v):,}"
    return f"{v:,.2f}"


def _as_dataset(data):
    return data if isinstance(data, Dataset) else Dataset.from_records(data)


# -----------------------------
# Charts
# -----------------------------

@dataclass(frozen=True)
class ChartProjection:
    label: str              # series name (the country)
    labels: List[str]       # risk factors, discovery order
    values: List[float]     # parsed values, NaN passed through
    color: str = "#ffe1ff"


class ChartProjector:
    def __init__(self, color="#ffe1ff"):
        self.color = color

    def project(self, data, year, country, risk_factors=None) -> ChartProjection:
        dataset = _as_dataset(data)
        if risk_factors is None:
            risk_factors = DatasetIndexer.infer(dataset).risk_factors

        rows = dataset.rows_for_year(year)
        rows = rows[rows[ENTITY_KEY] == country]
        if rows.empty:
            raise NoMatchingRowError(year, country)

        row = rows.head(1)
        values = [float(dataset.numeric(row, rf).iloc[0]) for rf in risk_factors]
        return ChartProjection(label=country, labels=list(risk_factors), values=values, color=self.color)


# -----------------------------
# Map
# -----------------------------

class ColorScale:
    """
    Continuous gradient over [0, max_value]. Linear RGB interpolation between
    evenly spaced stops; positions outside the domain are clamped.
    """

    def __init__(self, stops: Sequence[str], max_value: float):
        if len(stops) < 2:
            raise ValueError("A color scale needs at least two stops")
        self.stops = tuple(stops)
        self.max_value = float(max_value)
        self._rgb = [hex_to_rgb(s) for s in self.stops]

    def position(self, value) -> float:
        value = float(value)
        if math.isnan(value):
            return math.nan
        if self.max_value <= 0:
            return 0.0
        return min(max(value / self.max_value, 0.0), 1.0)

    def color_at(self, position) -> Optional[str]:
        if math.isnan(position):
            return None
        segments = len(self._rgb) - 1
        scaled = position * segments
        i = min(int(scaled), segments - 1)
        rgb = find_intermediate_color(self._rgb[i], self._rgb[i + 1], scaled - i, colortype="tuple")
        return "#{:02x}{:02x}{:02x}".format(*(int(round(c)) for c in rgb))

    def __call__(self, value) -> Optional[str]:
        return self.color_at(self.position(value))

    def plotly_colorscale(self):
        n = len(self.stops) - 1
        return [[i / n, c] for i, c in enumerate(self.stops)]


@dataclass(frozen=True)
class MapProjection:
    year: str
    risk_factor: str
    max_value: float
    names: List[str]
    values: List[float]
    positions: List[float]
    colors: List[Optional[str]]
    tooltips: List[str]
    colorscale: list = field(default_factory=list)
    outline_color: str = "#000"
    outline_width: float = 1
    fill_opacity: float = 0.7

    def region(self, name) -> Dict[str, object]:
        i = self.names.index(name)
        return {
            "name": name,
            "value": self.values[i],
            "position": self.positions[i],
            "color": self.colors[i],
            "tooltip": self.tooltips[i],
        }


class MapProjector:
    def __init__(self, gradient=DEFAULT_GRADIENT, outline_color="#000", outline_width=1,
                 fill_opacity=0.7, value_suffix="deaths"):
        self.gradient = tuple(gradient)
        self.outline_color = outline_color
        self.outline_width = outline_width
        self.fill_opacity = fill_opacity
        self.value_suffix = value_suffix

    def tooltip(self, name, value):
        suffix = f" {self.value_suffix}" if self.value_suffix else ""
        return f"<b>{name}</b><br>{format_value(value)}{suffix}"

    def project(self, data, year, risk_factor, boundaries) -> MapProjection:
        dataset = _as_dataset(data)
        rows = dataset.rows_for_year(year)
        if rows.empty:
            raise NoDataForYearError(year)

        values = dataset.numeric(rows, risk_factor)
        if values.dropna().empty:
            raise NoDataForYearError(year, risk_factor)
        max_value = float(np.nanmax(values.to_numpy()))
        scale = ColorScale(self.gradient, max_value)

        # first row per country wins, names matched exactly
        by_country = pd.Series(values.to_numpy(), index=rows[ENTITY_KEY].to_numpy())
        by_country = by_country[~by_country.index.duplicated(keep="first")]

        names, vals, positions, colors, tips = [], [], [], [], []
        for feature in (boundaries or {}).get("features", []):
            name = (feature.get("properties") or {}).get("name")
            if name is None:
                continue
            v = float(by_country[name]) if name in by_country.index else 0.0
            pos = scale.position(v)
            names.append(name)
            vals.append(v)
            positions.append(pos)
            colors.append(scale.color_at(pos))
            tips.append(self.tooltip(name, v))

        return MapProjection(
            year=str(year),
            risk_factor=risk_factor,
            max_value=max_value,
            names=names,
            values=vals,
            positions=positions,
            colors=colors,
            tooltips=tips,
            colorscale=scale.plotly_colorscale(),
            outline_color=self.outline_color,
            outline_width=self.outline_width,
            fill_opacity=self.fill_opacity,
        )
