"""Data access services for the NutriTrack dashboard."""

from .data_access import APPOINTMENTS, PATIENTS, DataAccess, Entity
from .errors import (
    DashboardError,
    RemoteFetchError,
    RemoteWriteError,
    ValidationError,
)

__all__ = [
    "APPOINTMENTS",
    "DashboardError",
    "DataAccess",
    "Entity",
    "PATIENTS",
    "RemoteFetchError",
    "RemoteWriteError",
    "ValidationError",
]
