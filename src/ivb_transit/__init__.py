"""IVB Transit Package

A Python package for listing Innsbruck public transport stations and their
real-time departures, with a local station cache and a CLI.
"""

__version__ = "0.1.0"

from .client import TransitClient
from .core.models import Departure, Station

__all__ = ["Departure", "Station", "TransitClient"]
