"""CSV export functionality for listings."""

import csv
from io import StringIO
from pathlib import Path
from typing import TextIO

from car_lot.models.pydantic_models import ListingRead

# Columns to export
EXPORT_COLUMNS = [
    "id",
    "status",
    "year",
    "make",
    "model",
    "mileage",
    "owner_id",
    "owner_username",
    "owner_phone",
    "owner_company",
    "photo_count",
    "created_at",
    "status_changed_at",
]


def listing_to_row(listing: ListingRead) -> dict[str, str]:
    """Convert a listing to a CSV row dictionary.

    Args:
        listing: ListingRead model.

    Returns:
        Dictionary with column names as keys.
    """
    owner = listing.owner
    return {
        "id": listing.id,
        "status": listing.status.value,
        "year": str(listing.year),
        "make": listing.make,
        "model": listing.model,
        "mileage": str(listing.mileage),
        "owner_id": listing.owner_id,
        "owner_username": owner.username if owner else "",
        "owner_phone": (owner.phone_number or "") if owner else "",
        "owner_company": (owner.company_name or "") if owner else "",
        "photo_count": str(len(listing.photo_urls)),
        "created_at": listing.created_at.isoformat(),
        "status_changed_at": listing.status_changed_at.isoformat() if listing.status_changed_at else "",
    }


def export_to_csv(
    listings: list[ListingRead],
    output: Path | TextIO | None = None,
) -> str:
    """Export listings to CSV format.

    Args:
        listings: Listings to export.
        output: Optional file path or file-like object. If None, returns string.

    Returns:
        CSV string if output is None, empty string otherwise.
    """
    rows = [listing_to_row(listing) for listing in listings]

    if isinstance(output, Path):
        with open(output, "w", newline="", encoding="utf-8") as f:
            _write_rows(f, rows)
        return ""

    if output is None:
        buffer = StringIO()
        _write_rows(buffer, rows)
        return buffer.getvalue()

    _write_rows(output, rows)
    return ""


def _write_rows(stream: TextIO, rows: list[dict[str, str]]) -> None:
    writer = csv.DictWriter(stream, fieldnames=EXPORT_COLUMNS)
    writer.writeheader()
    writer.writerows(rows)
