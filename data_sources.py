# data_sources.py
# Fetch the risk-factor table and the country boundaries (URL or local file).

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import requests

from dashboard_errors import FetchError

logger = logging.getLogger(__name__)

DATASET = "dataset"
BOUNDARIES = "boundaries"


def _is_url(location):
    return str(location).lower().startswith(("http://", "https://"))


def fetch_json(source, location, timeout=30):
    """GET (or read) one JSON document. Any failure comes back as FetchError."""
    if _is_url(location):
        try:
            r = requests.get(location, timeout=timeout)
            r.raise_for_status()
            return r.json()
        except requests.RequestException as e:
            raise FetchError(source, f"request to {location} failed: {e}") from e
        except ValueError as e:
            raise FetchError(source, f"{location} did not return JSON: {e}") from e

    path = Path(location)
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise FetchError(source, f"cannot read {path}: {e}") from e
    except ValueError as e:
        raise FetchError(source, f"{path} is not valid JSON: {e}") from e


def fetch_dataset(location, timeout=30):
    data = fetch_json(DATASET, location, timeout=timeout)
    if not isinstance(data, list):
        raise FetchError(DATASET, f"expected a JSON array, got {type(data).__name__}")
    return data


def fetch_boundaries(location, timeout=30):
    geo = fetch_json(BOUNDARIES, location, timeout=timeout)
    if not isinstance(geo, dict) or not isinstance(geo.get("features"), list):
        raise FetchError(BOUNDARIES, "expected a GeoJSON FeatureCollection with 'features'")
    return geo


def load_sources(settings):
    """
    Fetch both sources side by side. A source that fails is logged and
    comes back as None; there is no retry.
    Returns (records, boundaries).
    """
    with ThreadPoolExecutor(max_workers=2) as pool:
        futures = {
            DATASET: pool.submit(fetch_dataset, settings.data_url, settings.fetch_timeout),
            BOUNDARIES: pool.submit(fetch_boundaries, settings.boundaries_url, settings.fetch_timeout),
        }
        results = {}
        for name, fut in futures.items():
            try:
                results[name] = fut.result()
            except FetchError as e:
                logger.error("Error fetching %s: %s", name, e)
                results[name] = None

    records, boundaries = results[DATASET], results[BOUNDARIES]
    if records is not None:
        logger.info("Loaded %d records from %s", len(records), settings.data_url)
    if boundaries is not None:
        logger.info("Loaded %d boundary features from %s",
                    len(boundaries["features"]), settings.boundaries_url)
    return records, boundaries
