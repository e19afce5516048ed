import math

import pytest

from dashboard_errors import NoDataForYearError, NoMatchingRowError
from projections import (
    DEFAULT_GRADIENT,
    ChartProjector,
    ColorScale,
    MapProjector,
    format_value,
)


# -----------------------------
# Charts
# -----------------------------

def test_chart_projection_of_example(records):
    proj = ChartProjector().project(records, "2019", "A")

    assert proj.label == "A"
    assert proj.labels == ["Smoking", "Alcohol"]
    assert proj.values == [10.0, 5.0]
    assert proj.color == "#ffe1ff"


def test_chart_accepts_int_year(records):
    assert ChartProjector().project(records, 2019, "B").values == [20.0, 15.0]


def test_chart_values_follow_given_risk_factor_order(records):
    proj = ChartProjector(color="#123456").project(records, "2019", "A", risk_factors=["Alcohol", "Smoking"])
    assert proj.values == [5.0, 10.0]
    assert proj.color == "#123456"


def test_chart_passes_nan_through():
    data = [
        {"Year": 2019, "Entity": "A", "Smoking": "n/a", "Alcohol": "5"},
        {"Year": 2019, "Entity": "B", "Smoking": "1"},  # no Alcohol key
    ]
    a = ChartProjector().project(data, "2019", "A")
    b = ChartProjector().project(data, "2019", "B")

    assert math.isnan(a.values[0])
    assert a.values[1] == 5.0
    assert b.values[0] == 1.0
    assert math.isnan(b.values[1])


def test_chart_takes_first_match():
    data = [
        {"Year": 2019, "Entity": "A", "Smoking": "1"},
        {"Year": 2019, "Entity": "A", "Smoking": "2"},
    ]
    assert ChartProjector().project(data, "2019", "A").values == [1.0]


def test_chart_without_row_raises(records):
    with pytest.raises(NoMatchingRowError) as exc:
        ChartProjector().project(records, "2020", "A")
    assert exc.value.country == "A"
    assert exc.value.year == "2020"


# -----------------------------
# Color scale
# -----------------------------

def test_color_scale_stops_and_midpoints():
    scale = ColorScale(DEFAULT_GRADIENT, 20)

    assert scale(0) == "#ffc0cb"
    assert scale(10) == "#ff00ff"
    assert scale(20) == "#ff0000"
    # halfway between pink (255,192,203) and magenta (255,0,255)
    assert scale(5) == "#ff60e5"


def test_color_scale_clamps_and_handles_zero_max():
    scale = ColorScale(DEFAULT_GRADIENT, 20)
    assert scale.position(-5) == 0.0
    assert scale.position(40) == 1.0
    assert math.isnan(scale.position(float("nan")))
    assert scale.color_at(float("nan")) is None

    flat = ColorScale(DEFAULT_GRADIENT, 0)
    assert flat.position(0) == 0.0


def test_color_scale_needs_two_stops():
    with pytest.raises(ValueError):
        ColorScale(["#ffffff"], 1)


def test_plotly_colorscale_spreads_stops_evenly():
    assert ColorScale(DEFAULT_GRADIENT, 1).plotly_colorscale() == [
        [0.0, "#ffc0cb"], [0.5, "#ff00ff"], [1.0, "#ff0000"],
    ]


# -----------------------------
# Map
# -----------------------------

def test_map_projection_of_example(records, boundaries):
    proj = MapProjector().project(records, "2019", "Smoking", boundaries)

    assert proj.max_value == 20.0
    assert proj.names == ["A", "B", "C"]
    assert proj.region("A")["position"] == pytest.approx(0.5)
    assert proj.region("B")["position"] == pytest.approx(1.0)
    assert proj.region("A")["color"] == "#ff00ff"
    assert proj.region("B")["color"] == "#ff0000"
    assert proj.outline_color == "#000"
    assert proj.outline_width == 1
    assert proj.fill_opacity == 0.7


def test_missing_country_is_treated_as_explicit_zero(records, boundaries, make_feature):
    data = records + [{"Year": 2019, "Entity": "D", "Smoking": "0", "Alcohol": "0"}]
    boundaries["features"].append(make_feature("D"))

    proj = MapProjector().project(data, "2019", "Smoking", boundaries)
    missing, zero = proj.region("C"), proj.region("D")

    assert missing["value"] == zero["value"] == 0.0
    assert missing["position"] == zero["position"] == 0.0
    assert missing["color"] == zero["color"] == "#ffc0cb"
    assert missing["tooltip"] == "<b>C</b><br>0 deaths"
    assert zero["tooltip"] == "<b>D</b><br>0 deaths"


def test_map_colors_are_monotonic_in_value(make_feature):
    values = [0, 3, 7, 12, 18, 25, 40]
    data = [{"Year": 2000, "Entity": f"c{i}", "X": str(v)} for i, v in enumerate(values)]
    geo = {"features": [make_feature(f"c{i}") for i in range(len(values))]}

    proj = MapProjector().project(data, "2000", "X", geo)

    assert proj.positions == sorted(proj.positions)
    assert proj.positions[-1] == 1.0


def test_name_join_is_exact(records, make_feature):
    geo = {"features": [make_feature("a"), make_feature("A ")]}
    proj = MapProjector().project(records, "2019", "Smoking", geo)
    assert proj.values == [0.0, 0.0]


def test_features_without_name_are_skipped(records):
    geo = {"features": [{"properties": {}}, {"properties": {"name": "A"}}]}
    proj = MapProjector().project(records, "2019", "Smoking", geo)
    assert proj.names == ["A"]


def test_map_ignores_nan_in_max(boundaries):
    data = [
        {"Year": 2019, "Entity": "A", "Smoking": "10"},
        {"Year": 2019, "Entity": "B", "Smoking": "oops"},
    ]
    proj = MapProjector().project(data, "2019", "Smoking", boundaries)

    assert proj.max_value == 10.0
    assert math.isnan(proj.region("B")["value"])
    assert proj.region("B")["color"] is None
    assert proj.region("B")["tooltip"] == "<b>B</b><br>NaN deaths"


def test_year_without_rows_raises(records, boundaries):
    with pytest.raises(NoDataForYearError):
        MapProjector().project(records, "1990", "Smoking", boundaries)


def test_year_with_only_nan_values_raises(boundaries):
    data = [{"Year": 2019, "Entity": "A", "Smoking": "n/a"}]
    with pytest.raises(NoDataForYearError) as exc:
        MapProjector().project(data, "2019", "Smoking", boundaries)
    assert exc.value.risk_factor == "Smoking"


def test_tooltip_suffix_is_configurable(records, boundaries):
    proj = MapProjector(value_suffix="").project(records, "2019", "Alcohol", boundaries)
    assert proj.region("B")["tooltip"] == "<b>B</b><br>15"


def test_format_value():
    assert format_value(10.0) == "10"
    assert format_value(1234) == "1,234"
    assert format_value(12.5) == "12.50"
    assert format_value(float("nan")) == "NaN"


def test_values_with_trailing_text_are_read_like_the_browser(boundaries):
    data = [
        {"Year": 2019, "Entity": "A", "Smoking": "10 deaths", "Alcohol": True},
        {"Year": 2019, "Entity": "B", "Smoking": "20,5"},
    ]
    chart = ChartProjector().project(data, "2019", "A")
    assert chart.values[0] == 10.0
    assert math.isnan(chart.values[1])

    proj = MapProjector().project(data, "2019", "Smoking", boundaries)
    assert proj.max_value == 20.0
    assert proj.region("A")["position"] == pytest.approx(0.5)
