# steam_catalog/utils/json_exporter.py

"""JSON export utility for catalog records.

Writes the catalog as a structured JSON document for analysis or for
interoperability with launchers and other tools.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Sequence

if TYPE_CHECKING:
    from steam_catalog.core.catalog_record import CatalogRecord

logger = logging.getLogger("steamcatalog.json_exporter")

__all__ = ["JSONExporter"]


class JSONExporter:
    """Exports catalog records as JSON, keeping catalog order."""

    @staticmethod
    def to_document(records: Sequence[CatalogRecord]) -> dict[str, Any]:
        return {"games": [record.to_dict() for record in records], "count": len(records)}

    @staticmethod
    def to_json(records: Sequence[CatalogRecord]) -> str:
        """Serialize records to an indented JSON string."""
        return json.dumps(JSONExporter.to_document(records), indent=2, ensure_ascii=False)

    @staticmethod
    def export(records: Sequence[CatalogRecord], output_path: Path) -> None:
        """Exports catalog records as a JSON file.

        Args:
            records: Records to export.
            output_path: Path to write the JSON file.

        Raises:
            OSError: If the file cannot be written.
        """
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as fh:
            json.dump(JSONExporter.to_document(records), fh, indent=2, ensure_ascii=False)

        logger.info("Exported %d records (JSON) to %s", len(records), output_path)
