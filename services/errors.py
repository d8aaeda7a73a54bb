"""Failure signals shared by the data access layer and the screen controllers."""


class DashboardError(RuntimeError):
    """Base exception for dashboard failures."""


class RemoteFetchError(DashboardError):
    """A read from the data store failed."""


class RemoteWriteError(DashboardError):
    """A create, update or delete was rejected by the data store or never reached it."""


class ValidationError(DashboardError):
    """Input was rejected locally; no remote call was made."""


__all__ = [
    "DashboardError",
    "RemoteFetchError",
    "RemoteWriteError",
    "ValidationError",
]
