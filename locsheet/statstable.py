"""A table of per-sheet statistics, filled in by a background parser."""

from __future__ import annotations

import os
import threading
from collections.abc import Mapping
from dataclasses import dataclass

from locsheet.localization import EntryStatus, Localization
from locsheet.stats import StatsParser

COLUMNS = (
    "PrimaryLanguage",
    "LocaleCode",
    "Language",
    "Path",
    "Normal",
    "New",
    "Modified",
    "Deprecated",
    "Total",
    "Status",
)

PRIMARY_MARKER = "\uf005"
PRIMARY_LOCALE_CODE = "en"
RELOADING_TEXT = "Reloading..."


@dataclass
class StatEntry:
    """One row of the statistics table: a sheet and its entry counts."""

    locale_code: str = ""
    language: str = ""
    path: str = ""
    normal_entries: int = 0
    new_entries: int = 0
    modified_entries: int = 0
    deprecated_entries: int = 0
    total_entries: int = 0
    status: str = ""
    is_refreshing: bool = False

    def column_text(self, column: str) -> str:
        """Return the text shown for this row in ``column``."""
        if column == "PrimaryLanguage":
            return PRIMARY_MARKER if self.locale_code == PRIMARY_LOCALE_CODE else ""
        if column == "Status":
            return RELOADING_TEXT if self.is_refreshing else self.status
        texts = {
            "LocaleCode": self.locale_code,
            "Language": self.language,
            "Path": self.path,
            "Normal": str(self.normal_entries),
            "New": str(self.new_entries),
            "Modified": str(self.modified_entries),
            "Deprecated": str(self.deprecated_entries),
            "Total": str(self.total_entries),
        }
        try:
            return texts[column]
        except KeyError:
            return f"Unsupported Column: {column}"


class StatsTable:
    """Lists every available sheet and counts its entries on a background thread."""

    def __init__(self, localization: Localization) -> None:
        self.localization = localization
        self.items: list[StatEntry] = []
        self._parser: StatsParser | None = None
        self._lock = threading.Lock()
        self.refresh_all()

    def _cleanup(self) -> None:
        if self._parser is not None:
            self._parser.stop()
            self._parser.join()
            self._parser = None

    def refresh_all(self) -> None:
        """Rebuild the rows from the available sheets and start counting their entries."""
        self._cleanup()
        content_dir = os.path.abspath(self.localization.content_dir)
        items: list[StatEntry] = []
        paths: list[str] = []
        for info in self.localization.available_localizations():
            full_path = os.path.join(content_dir, info.file_path)
            paths.append(full_path)
            items.append(
                StatEntry(
                    locale_code=info.locale_code,
                    language=info.localized_name,
                    path=full_path,
                    is_refreshing=True,
                )
            )
        with self._lock:
            self.items = items
        self._parser = StatsParser(self.localization, paths, self.on_file_parse_complete)
        self._parser.start()

    def on_file_parse_complete(self, path: str, stats: Mapping[EntryStatus, int]) -> bool:
        """Store the counts for the row at ``path``; return False if no row has that path."""
        with self._lock:
            for entry in self.items:
                if entry.path != path:
                    continue
                entry.is_refreshing = False
                entry.normal_entries = stats.get(EntryStatus.NONE, 0)
                entry.new_entries = stats.get(EntryStatus.NEW, 0)
                entry.modified_entries = stats.get(EntryStatus.MODIFIED, 0)
                entry.deprecated_entries = stats.get(EntryStatus.DEPRECATED, 0)
                # Deprecated entries are not part of the total.
                entry.total_entries = (
                    entry.normal_entries + entry.new_entries + entry.modified_entries
                )
                return True
        return False

    def cancel_all(self) -> None:
        """Ask the background parser to stop before its next sheet."""
        if self._parser is not None:
            self._parser.stop()

    def wait(self, timeout: float | None = None) -> bool:
        """Wait for the background parser; return True if it has finished."""
        if self._parser is None:
            return True
        return self._parser.join(timeout)