# Dashboard settings. Edit the right hand side of these as you like,
# then restart app_core.py.
import os

APP_TITLE = "Risk Factor Dashboard"

# Where the data comes from: an http(s) URL or a local path.
# Environment variables win over the defaults below.
DATA_URL = os.environ.get("RISK_DASHBOARD_DATA_URL", "risk_factors.json")
BOUNDARIES_URL = os.environ.get("RISK_DASHBOARD_BOUNDARIES_URL", "countries.geo.json")
FETCH_TIMEOUT = float(os.environ.get("RISK_DASHBOARD_FETCH_TIMEOUT", 30))

# Friendly names for risk factors in the dropdown (left: column name in the data)
# Anything not listed here is shown as it appears in the data.
LABELS = {
    # "High systolic blood pressure": "Blood pressure",
}

# ----- Charts -----
CHART_COLOR = "#ffe1ff"       # line + bar share this colour
CHART_TEXT_COLOR = "#e0e0e0"
CHART_GRID_COLOR = "#444"

# ----- Map -----
# Low -> mid -> high, spread over [0, max value of the selected year]
MAP_GRADIENT = ("#ffc0cb", "#ff00ff", "#ff0000")   # pink, magenta, red
MAP_OUTLINE_COLOR = "#000"
MAP_OUTLINE_WIDTH = 1
MAP_FILL_OPACITY = 0.7
VALUE_SUFFIX = "deaths"        # shown after the value in the map tooltip
MAP_PROJECTION = "natural earth"   # Try: "orthographic", "equirectangular", "mercator", "miller"
MAP_CENTER = (20, 0)               # (lat, lon)
