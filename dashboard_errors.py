# dashboard_errors.py
# Failure modes raised by the loaders, the indexer and the projections.


class DashboardError(Exception):
    """Base class for every error the dashboard raises on purpose."""


class FetchError(DashboardError):
    """A data source could not be fetched or decoded."""

    def __init__(self, source, message):
        super().__init__(f"{source}: {message}")
        self.source = source


class EmptyDatasetError(DashboardError):
    pass


class DatasetSchemaError(DashboardError):
    pass


class NoMatchingRowError(DashboardError):
    def __init__(self, year, country):
        super().__init__(f"No row for country '{country}' in year {year}")
        self.year = year
        self.country = country


class NoDataForYearError(DashboardError):
    def __init__(self, year, risk_factor=None):
        what = f" with values for '{risk_factor}'" if risk_factor else ""
        super().__init__(f"No rows for year {year}{what}")
        self.year = year
        self.risk_factor = risk_factor


class EmptyDomainError(DashboardError):
    def __init__(self, domain):
        super().__init__(f"Cannot pick a default {domain}: no values available")
        self.domain = domain
