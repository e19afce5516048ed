# selection.py
# Selection state and the rule for which views redraw when a selector changes.

import logging
from dataclasses import dataclass, field, replace
from typing import Any, List, Optional

from dashboard_errors import EmptyDomainError, NoDataForYearError, NoMatchingRowError
from projections import ChartProjector, MapProjector
from risk_data import Dataset, DatasetIndex, DatasetIndexer

logger = logging.getLogger(__name__)

YEAR = "year"
COUNTRY = "country"
RISK_FACTOR = "riskFactor"

ALL_VIEWS = ("charts", "map")
PROJECTION_ERRORS = (NoMatchingRowError, NoDataForYearError)

# which views depend on which selector
REFRESHES = {
    YEAR: ("charts", "map"),
    COUNTRY: ("charts",),
    RISK_FACTOR: ("map",),
}


@dataclass(frozen=True)
class DashboardSettings:
    app_title: str = "Risk Factor Dashboard"
    data_url: str = "risk_factors.json"
    boundaries_url: str = "countries.geo.json"
    fetch_timeout: float = 30.0
    labels: dict = field(default_factory=dict)
    chart_color: str = "#ffe1ff"
    chart_text_color: str = "#e0e0e0"
    chart_grid_color: str = "#444"
    map_gradient: tuple = ("#ffc0cb", "#ff00ff", "#ff0000")
    map_outline_color: str = "#000"
    map_outline_width: float = 1
    map_fill_opacity: float = 0.7
    value_suffix: str = "deaths"
    map_projection: str = "natural earth"
    map_center: tuple = (20, 0)

    @classmethod
    def from_hook(cls, hook):
        """Snapshot the constants of a settings module (see dashboard_hook.py)."""
        defaults = cls()
        return cls(
            app_title=getattr(hook, "APP_TITLE", defaults.app_title),
            data_url=getattr(hook, "DATA_URL", defaults.data_url),
            boundaries_url=getattr(hook, "BOUNDARIES_URL", defaults.boundaries_url),
            fetch_timeout=float(getattr(hook, "FETCH_TIMEOUT", defaults.fetch_timeout)),
            labels=dict(getattr(hook, "LABELS", {}) or {}),
            chart_color=getattr(hook, "CHART_COLOR", defaults.chart_color),
            chart_text_color=getattr(hook, "CHART_TEXT_COLOR", defaults.chart_text_color),
            chart_grid_color=getattr(hook, "CHART_GRID_COLOR", defaults.chart_grid_color),
            map_gradient=tuple(getattr(hook, "MAP_GRADIENT", defaults.map_gradient)),
            map_outline_color=getattr(hook, "MAP_OUTLINE_COLOR", defaults.map_outline_color),
            map_outline_width=getattr(hook, "MAP_OUTLINE_WIDTH", defaults.map_outline_width),
            map_fill_opacity=getattr(hook, "MAP_FILL_OPACITY", defaults.map_fill_opacity),
            value_suffix=getattr(hook, "VALUE_SUFFIX", defaults.value_suffix),
            map_projection=getattr(hook, "MAP_PROJECTION", defaults.map_projection),
            map_center=tuple(getattr(hook, "MAP_CENTER", defaults.map_center)),
        )

    def chart_projector(self):
        return ChartProjector(color=self.chart_color)

    def map_projector(self):
        return MapProjector(
            gradient=self.map_gradient,
            outline_color=self.map_outline_color,
            outline_width=self.map_outline_width,
            fill_opacity=self.map_fill_opacity,
            value_suffix=self.value_suffix,
        )


@dataclass(frozen=True)
class Selection:
    year: str
    country: str
    riskFactor: str


@dataclass
class DashboardContext:
    """Everything the controller works on. Boundaries stay None until they load."""

    dataset: Optional[Dataset] = None
    index: Optional[DatasetIndex] = None
    boundaries: Optional[dict] = None
    settings: DashboardSettings = field(default_factory=DashboardSettings)
    chart_views: List[Any] = field(default_factory=list)
    map_view: Any = None
    map_layer: Any = None

    @classmethod
    def from_sources(cls, records=None, boundaries=None, settings=None):
        dataset = index = None
        if records is not None:
            dataset = Dataset.from_records(records)
            index = DatasetIndexer.infer(dataset)
        return cls(dataset=dataset, index=index, boundaries=boundaries,
                   settings=settings or DashboardSettings())

    @property
    def has_data(self):
        return self.dataset is not None and self.index is not None

    @property
    def has_boundaries(self):
        return self.boundaries is not None

    def replace_map_layer(self, projection):
        # old layer goes before the new one is drawn
        if self.map_layer is not None and self.map_view is not None:
            self.map_view.remove(self.map_layer)
        self.map_layer = None
        if self.map_view is not None:
            self.map_layer = self.map_view.render(projection)
        return self.map_layer


def default_selection(index: DatasetIndex) -> Selection:
    for domain, values in ((YEAR, index.years), (COUNTRY, index.countries),
                           (RISK_FACTOR, index.risk_factors)):
        if not values:
            raise EmptyDomainError(domain)
    return Selection(year=index.years[0], country=index.countries[0],
                     riskFactor=index.risk_factors[0])


class SelectionController:
    def __init__(self, context: DashboardContext, selection: Optional[Selection] = None):
        self.context = context
        self.selection = selection
        self._charts = context.settings.chart_projector()
        self._map = context.settings.map_projector()

    def initialize(self, on_error=None):
        """Pick the first value of every domain and draw everything once."""
        if not self.context.has_data:
            raise EmptyDomainError(YEAR)
        self.selection = default_selection(self.context.index)
        return self.refresh(ALL_VIEWS, on_error)

    def select(self, field_name, value, on_error=None):
        if field_name not in REFRESHES:
            raise ValueError(f"Unknown selector: {field_name!r}")
        if self.selection is None:
            raise RuntimeError("Selection is not initialized")
        self.selection = replace(self.selection, **{field_name: value})
        return self.refresh(REFRESHES[field_name], on_error)

    def refresh(self, views, on_error=None):
        """
        Re-project and push to the given views. Returns {view: projection}.

        Projection errors propagate unless `on_error(view, exc)` is given, in
        which case that view is reported and the remaining views still refresh.
        """
        out = {}
        for view in views:
            try:
                projection = self._refresh_view(view)
            except PROJECTION_ERRORS as e:
                if on_error is None:
                    raise
                on_error(view, e)
                continue
            if projection is not None:
                out[view] = projection
        return out

    def _refresh_view(self, view):
        if view == "charts":
            projection = self.project_charts()
            for chart in self.context.chart_views:
                chart.render(projection)
            return projection
        if not self.context.has_boundaries:
            logger.debug("Boundaries not loaded yet; map refresh skipped")
            return None
        projection = self.project_map()
        self.context.replace_map_layer(projection)
        return projection

    def project_charts(self):
        sel = self.selection
        return self._charts.project(self.context.dataset, sel.year, sel.country,
                                    risk_factors=self.context.index.risk_factors)

    def project_map(self):
        sel = self.selection
        return self._map.project(self.context.dataset, sel.year, sel.riskFactor,
                                 self.context.boundaries)
