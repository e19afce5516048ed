# app_core.py
# Risk Factor Dashboard: year / country / risk factor dropdowns driving
# a line chart, a bar chart and a choropleth map.

import logging
from dataclasses import replace
from functools import partial

from dash import Dash, dcc, html, Input, Output, exceptions, ctx, no_update

import dashboard_hook as HOOK
from dashboard_errors import DatasetSchemaError, EmptyDatasetError, EmptyDomainError
from data_sources import load_sources
from figures import FigureView, bar_figure, empty_fig, line_figure, map_figure
from risk_data import risk_factor_options
from selection import (
    ALL_VIEWS,
    COUNTRY,
    REFRESHES,
    RISK_FACTOR,
    YEAR,
    DashboardContext,
    DashboardSettings,
    Selection,
    SelectionController,
)

logger = logging.getLogger(__name__)

# dropdown id -> selector it drives
SELECTORS = {
    "yearSelect": YEAR,
    "countrySelect": COUNTRY,
    "riskFactorSelect": RISK_FACTOR,
}


# -----------------------------
# Context
# -----------------------------

def build_context(records, boundaries, settings):
    """
    Index whatever loaded. A dataset that cannot be indexed leaves the
    dashboard uninitialized (empty dropdowns, no charts), same as a failed fetch.
    """
    try:
        return DashboardContext.from_sources(records, boundaries, settings)
    except (EmptyDatasetError, DatasetSchemaError) as e:
        logger.error("Dataset unusable: %s", e)
        return DashboardContext(boundaries=boundaries, settings=settings)


# -----------------------------
# Views
# -----------------------------

class DashViews:
    """
    Fresh figure views for one request, and a context copy that owns them.
    Projection errors land here as message figures instead of charts.
    """

    def __init__(self, context):
        settings = context.settings
        self.line = FigureView(line_figure, settings)
        self.bar = FigureView(bar_figure, settings)
        self.map = FigureView(partial(map_figure, boundaries=context.boundaries), settings)
        self.context = replace(context, chart_views=[self.line, self.bar],
                               map_view=self.map, map_layer=None)
        self.errors = {}

    def on_error(self, view, exc):
        logger.warning("Cannot draw %s: %s", view, exc)
        self.errors[view] = empty_fig(str(exc))

    def figures(self, views):
        """(line, bar, map) for the refreshed views, no_update for the rest."""
        line = bar = map_fig = no_update
        if "charts" in views:
            line = self.errors.get("charts", self.line.figure)
            bar = self.errors.get("charts", self.bar.figure)
        if "map" in views:
            map_fig = self.errors.get("map", self.map.figure)
            if map_fig is None:
                map_fig = no_update
        return line, bar, map_fig


def _options(values):
    return [{"label": v, "value": v} for v in values]


# -----------------------------
# App layout
# -----------------------------

def build_layout(context):
    settings = context.settings
    selection = None
    views = DashViews(context)
    if context.has_data:
        controller = SelectionController(views.context)
        try:
            controller.initialize(on_error=views.on_error)
            selection = controller.selection
        except EmptyDomainError as e:
            logger.error("Cannot initialise selectors: %s", e)
    index = context.index if selection is not None else None

    def dropdown(label, id_, options, value):
        return html.Div([
            html.Label(label),
            dcc.Dropdown(id=id_, options=options, value=value, clearable=False),
        ])

    if selection is None:
        line_fig = bar_fig = empty_fig("Data unavailable")
        map_fig = empty_fig("Data unavailable")
    else:
        line_fig, bar_fig, map_fig = views.figures(ALL_VIEWS)
    if not context.has_boundaries:
        map_fig = empty_fig("Country boundaries unavailable")

    return html.Div(
        style={"fontFamily": "system-ui, -apple-system, Segoe UI, Roboto, Helvetica, Arial",
               "padding": "16px", "maxWidth": "1200px", "margin": "0 auto"},
        children=[
            html.H2(settings.app_title, style={"marginBottom": "8px"}),

            # Controls
            html.Div(
                style={"display": "grid", "gridTemplateColumns": "1fr 2fr 2fr", "gap": "12px",
                       "alignItems": "center", "margin": "12px 0 20px 0"},
                children=[
                    dropdown("Year", "yearSelect",
                             _options(index.years) if index else [],
                             selection.year if selection else None),
                    dropdown("Country", "countrySelect",
                             _options(index.countries) if index else [],
                             selection.country if selection else None),
                    dropdown("Risk factor", "riskFactorSelect",
                             risk_factor_options(index, settings.labels) if index else [],
                             selection.riskFactor if selection else None),
                ],
            ),

            # Line + bar
            html.Div(
                style={"display": "grid", "gridTemplateColumns": "1fr 1fr", "gap": "16px"},
                children=[
                    dcc.Graph(id="lineChart", figure=line_fig,
                              config={"displaylogo": False}, style={"height": "45vh"}),
                    dcc.Graph(id="barChart", figure=bar_fig,
                              config={"displaylogo": False}, style={"height": "45vh"}),
                ],
            ),

            dcc.Graph(
                id="mapContainer",
                figure=map_fig,
                config={"displaylogo": False, "modeBarButtonsToRemove": ["lasso2d", "select2d"]},
                style={"height": "70vh", "marginTop": "16px"},
            ),
        ],
    )


# -----------------------------
# Callbacks
# -----------------------------

def update_views(context, year, country, risk_factor, triggered_id):
    """
    Apply the change of the triggering dropdown through the controller and
    return (line, bar, map), with no_update for views it left alone.
    """
    field = SELECTORS.get(triggered_id)
    if field is None or not context.has_data or None in (year, country, risk_factor):
        raise exceptions.PreventUpdate

    views = DashViews(context)
    current = Selection(year=str(year), country=country, riskFactor=risk_factor)
    controller = SelectionController(views.context, current)
    changed = {YEAR: current.year, COUNTRY: country, RISK_FACTOR: risk_factor}[field]
    controller.select(field, changed, on_error=views.on_error)
    return views.figures(REFRESHES[field])


def register_callbacks(app, context):
    # the layout already carries the initial figures
    @app.callback(
        Output("lineChart", "figure"),
        Output("barChart", "figure"),
        Output("mapContainer", "figure"),
        Input("yearSelect", "value"),
        Input("countrySelect", "value"),
        Input("riskFactorSelect", "value"),
        prevent_initial_call=True,
    )
    def on_selection(year, country, risk_factor):
        return update_views(context, year, country, risk_factor, ctx.triggered_id)

    return on_selection


def create_app(context):
    app = Dash(__name__, title=context.settings.app_title)
    app.layout = build_layout(context)
    register_callbacks(app, context)
    return app


# -----------------------------
# Run
# -----------------------------
if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    settings = DashboardSettings.from_hook(HOOK)
    records, boundaries = load_sources(settings)
    context = build_context(records, boundaries, settings)
    if context.has_data:
        logger.info("Years: %d, countries: %d, risk factors: %s",
                    len(context.index.years), len(context.index.countries),
                    ", ".join(context.index.risk_factors))
    app = create_app(context)
    app.run(debug=True, dev_tools_hot_reload=False)  # Dash 3.x
