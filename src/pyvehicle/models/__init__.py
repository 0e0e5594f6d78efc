"""Data models for the vehicle API."""

from pyvehicle.models.token import TokenPair
from pyvehicle.models.vehicle import VehicleDetail, VehicleSpec, VehicleSummary

__all__ = [
    "TokenPair",
    "VehicleDetail",
    "VehicleSpec",
    "VehicleSummary",
]
