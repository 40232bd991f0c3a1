"""Database module."""

from car_lot.database.engine import get_engine, get_session, init_db
from car_lot.database.repository import (
    ApplicationRepository,
    ListingRepository,
    ProfileRepository,
)

__all__ = [
    "get_engine",
    "get_session",
    "init_db",
    "ApplicationRepository",
    "ListingRepository",
    "ProfileRepository",
]
