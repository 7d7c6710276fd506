"""
Database package for the Lern API startup layer.

Only readiness is handled here: connectivity checks and schema application.
"""

from .readiness import (
    DatabaseReadiness,
    build_engine,
    wait_for_database,
)

__all__ = [
    "DatabaseReadiness",
    "build_engine",
    "wait_for_database",
]
