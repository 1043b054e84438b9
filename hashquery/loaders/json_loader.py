"""JSON record loader for collection definitions."""

import json
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from ..errors import DataFileError

logger = logging.getLogger(__name__)


def parse_iso_value(value: str) -> Union[date, datetime, str]:
    """Parse an ISO-8601 date or datetime string; other strings come back unchanged."""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        if len(text) == 10:
            return date.fromisoformat(text)
        return datetime.fromisoformat(text)
    except ValueError:
        return value


class JSONRecordLoader:
    """Loads records from JSON files under a data directory.

    Each matching file holds either one JSON object (one record) or an
    array of objects. Files are read in sorted path order.
    """

    def __init__(self, data_path: Union[str, Path] = "data", date_fields: Optional[Iterable[str]] = None):
        """Initialize the loader.

        Args:
            data_path: Directory the glob patterns are resolved against
            date_fields: Field names whose ISO-8601 string values are
                converted to date/datetime objects
        """
        self.data_path = Path(data_path)
        self.date_fields = frozenset(date_fields or ())

    def load(self, pattern: str) -> List[Dict[str, Any]]:
        """Load every record from the files matching ``pattern``.

        Raises:
            DataFileError: If no file matches, a file is not valid JSON, or
                a file holds anything other than an object or array of objects
        """
        files = sorted(path for path in self.data_path.glob(pattern) if path.is_file())
        if not files:
            raise DataFileError(
                f"No files found matching pattern: {self.data_path / pattern}",
                path=str(self.data_path / pattern),
            )

        records: List[Dict[str, Any]] = []
        for file_path in files:
            records.extend(self._load_file(file_path))

        logger.debug(f"Loaded {len(records)} records from {len(files)} files matching {pattern}")
        return records

    def _load_file(self, file_path: Path) -> List[Dict[str, Any]]:
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise DataFileError(f"{file_path} has a syntax error:\n{e}", path=str(file_path), cause=e) from e
        except OSError as e:
            raise DataFileError(f"{file_path} couldn't be loaded:\n{e}", path=str(file_path), cause=e) from e

        if isinstance(data, dict):
            items = [data]
        elif isinstance(data, list):
            items = data
        else:
            raise DataFileError(
                f"{file_path} should contain an object or an array of objects, "
                f"but contained {type(data).__name__}",
                path=str(file_path),
            )

        records = []
        for index, item in enumerate(items, start=1):
            if not isinstance(item, dict):
                raise DataFileError(
                    f"{file_path} item {index} should be an object, but was {type(item).__name__}",
                    path=str(file_path),
                )
            records.append(self._coerce_dates(item))
        return records

    def _coerce_dates(self, record: Dict[str, Any]) -> Dict[str, Any]:
        if not self.date_fields:
            return record
        coerced = dict(record)
        for field_name in self.date_fields:
            value = coerced.get(field_name)
            if isinstance(value, str):
                coerced[field_name] = parse_iso_value(value)
        return coerced
