"""Record loaders."""

from .json_loader import JSONRecordLoader, parse_iso_value

__all__ = ["JSONRecordLoader", "parse_iso_value"]
