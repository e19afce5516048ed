# figures.py
# Plotly figures for the three display surfaces.

import numpy as np
import plotly.graph_objects as go


def empty_fig(msg: str):
    fig = go.Figure()
    fig.add_annotation(text=msg, showarrow=False, xref="paper", yref="paper", x=0.5, y=0.5)
    fig.update_layout(
        xaxis=dict(visible=False),
        yaxis=dict(visible=False),
        margin=dict(l=40, r=20, t=40, b=40),
    )
    return fig


def _style_axes(fig, settings):
    axis = dict(tickfont=dict(color=settings.chart_text_color), gridcolor=settings.chart_grid_color)
    fig.update_layout(
        xaxis=axis,
        yaxis=axis,
        legend=dict(font=dict(color=settings.chart_text_color)),
        showlegend=True,
        margin=dict(l=40, r=20, t=40, b=40),
    )
    return fig


def line_figure(projection, settings):
    fig = go.Figure(go.Scatter(
        x=projection.labels,
        y=projection.values,
        mode="lines+markers",
        name=projection.label,
        line=dict(color=projection.color),
        marker=dict(color=projection.color),
    ))
    return _style_axes(fig, settings)


def bar_figure(projection, settings):
    fig = go.Figure(go.Bar(
        x=projection.labels,
        y=projection.values,
        name=projection.label,
        marker=dict(color=projection.color, line=dict(color=projection.color)),
    ))
    return _style_axes(fig, settings)


def map_figure(projection, settings, boundaries=None):
    """
    One choropleth layer over the boundary polygons, joined on properties.name.

    plotly colours each region from z over [zmin, zmax] with the projection's
    colorscale, which is the same gradient and domain MapProjector used for
    `projection.colors`; the figure does not read `colors` itself.
    """
    zmax = map_color_range(projection)[1]
    fig = go.Figure(go.Choropleth(
        geojson=boundaries,
        featureidkey="properties.name",
        locations=projection.names,
        z=np.asarray(projection.values, dtype=float),
        zmin=0,
        zmax=zmax,
        colorscale=projection.colorscale,
        marker=dict(
            line=dict(color=projection.outline_color, width=projection.outline_width),
            opacity=projection.fill_opacity,
        ),
        text=projection.tooltips,
        hovertemplate="%{text}<extra></extra>",
        colorbar=dict(title=dict(text=projection.risk_factor)),
    ))
    lat, lon = settings.map_center
    fig.update_geos(
        projection_type=settings.map_projection,
        center=dict(lat=lat, lon=lon),
        showcountries=False,
    )
    fig.update_layout(
        margin=dict(l=10, r=10, t=40, b=10),
        title=f"{projection.risk_factor} — {projection.year}",
    )
    return fig


def map_color_range(projection):
    """[0, max]; a non-positive max gets a unit range so every region sits at the low stop."""
    top = projection.max_value
    return 0, (top if top > 0 else 1.0)


class FigureView:
    """
    Holds the last figure a controller pushed. Dash callbacks read `.figure`
    to return it. `build(projection, settings)` is one of the figure functions
    above; bind extra arguments first, e.g. `partial(map_figure, boundaries=geo)`.
    """

    def __init__(self, build, settings):
        self.build = build
        self.settings = settings
        self.figure = None

    def render(self, projection):
        self.figure = self.build(projection, self.settings)
        return self.figure

    def remove(self, layer):
        if self.figure is layer:
            self.figure = None
