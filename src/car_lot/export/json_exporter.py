"""JSON export functionality for listings."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, TextIO

from car_lot.models.pydantic_models import ListingRead


def export_to_json(
    listings: list[ListingRead],
    output: Path | TextIO | None = None,
    indent: int = 2,
) -> str:
    """Export listings to JSON format.

    Args:
        listings: Listings to export.
        output: Optional file path or file-like object. If None, returns string.
        indent: JSON indentation level.

    Returns:
        JSON string if output is None, empty string otherwise.
    """
    data: dict[str, Any] = {
        "exported_at": datetime.now(timezone.utc).isoformat(),
        "count": len(listings),
        "listings": [listing.model_dump(mode="json") for listing in listings],
    }
    text = json.dumps(data, indent=indent, ensure_ascii=False)

    if output is None:
        return text

    if isinstance(output, Path):
        output.write_text(text, encoding="utf-8")
    else:
        output.write(text)
    return ""
