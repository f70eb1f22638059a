"""String tables loaded from sheets, and the runtime that keeps them registered."""

from __future__ import annotations

import os
import sys
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

from locsheet.csvformat import parse_csv
from locsheet.localization import LocaleInfo, Localization, LocalizationError
from locsheet.settings import LOGGER, LocalizationSettings

KEY_COLUMN = "Key"
SOURCE_COLUMN = "SourceString"


class MissingTextError(LookupError):
    """Raised when a table or a key cannot be found.

    ``placeholder`` holds the compact text shown instead: ``(TNF:table)`` for a
    missing table, ``(KNF:key)`` for a missing key.
    """

    def __init__(self, message: str, placeholder: str) -> None:
        super().__init__(message)
        self.placeholder = placeholder


@dataclass
class StringTable:
    """Keys mapped to display strings, loaded under one table id."""

    table_id: str
    namespace: str = ""
    entries: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_file(cls, table_id: str, namespace: str, path: str | os.PathLike) -> StringTable:
        """Load the ``Key`` and ``SourceString`` columns of the sheet at ``path``."""
        try:
            with open(path, encoding="utf-8-sig", newline="") as handle:
                text = handle.read()
        except (OSError, UnicodeDecodeError) as error:
            raise LocalizationError(f"Failed to load file '{os.fspath(path)}'") from error

        rows = parse_csv(text)
        if not rows:
            raise LocalizationError(f"No header found in '{os.fspath(path)}'")
        header = rows[0]
        try:
            key_index = header.index(KEY_COLUMN)
            source_index = header.index(SOURCE_COLUMN)
        except ValueError:
            raise LocalizationError(
                f"Header of '{os.fspath(path)}' must have '{KEY_COLUMN}' and "
                f"'{SOURCE_COLUMN}' columns"
            ) from None

        table = cls(table_id=table_id, namespace=namespace)
        needed = max(key_index, source_index)
        for row in rows[1:]:
            if len(row) <= needed:
                continue
            key = row[key_index]
            if not key:
                continue
            if key in table.entries:
                LOGGER.warning("Duplicate key '%s' in string table '%s'", key, table_id)
                continue
            table.entries[key] = row[source_index]
        return table

    def find(self, key: str) -> str | None:
        """Return the display string for ``key``, or None."""
        return self.entries.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self.entries

    def __len__(self) -> int:
        return len(self.entries)


class StringTableRegistry:
    """The string tables currently available, by id."""

    def __init__(self) -> None:
        self._tables: dict[str, StringTable] = {}

    def register(self, table: StringTable) -> None:
        """Make ``table`` available under its id, replacing any table with that id."""
        if table.table_id in self._tables:
            LOGGER.warning("Replacing string table '%s'", table.table_id)
        self._tables[table.table_id] = table

    def unregister(self, table_id: str) -> StringTable | None:
        """Remove the table with ``table_id``; return it, or None if there was none."""
        return self._tables.pop(table_id, None)

    def find(self, table_id: str) -> StringTable | None:
        """Return the table with ``table_id``, or None."""
        return self._tables.get(table_id)

    def load_from_file(
        self, table_id: str, namespace: str, path: str | os.PathLike
    ) -> StringTable:
        """Load a table from the sheet at ``path`` and register it."""
        table = StringTable.from_file(table_id, namespace, path)
        self.register(table)
        return table

    def __contains__(self, table_id: object) -> bool:
        return table_id in self._tables

    def __iter__(self) -> Iterator[str]:
        return iter(self._tables)

    def __len__(self) -> int:
        return len(self._tables)


class LocalizationRuntime:
    """Keeps the game string table and the primary fallback table loaded."""

    def __init__(
        self,
        settings: LocalizationSettings,
        content_dir: str | os.PathLike,
        shipping: bool = False,
    ) -> None:
        self.settings = settings
        self.content_dir = os.fspath(content_dir)
        self.shipping = shipping
        self.localization = Localization(settings, self.content_dir)
        self.registry = StringTableRegistry()
        self.table_ids: list[str] = []
        self.current_culture: str | None = None

    def _resolve(self, path: str) -> str:
        return os.path.join(self.content_dir, path)

    def _has_command_line_flag(self, argv: Sequence[str]) -> bool:
        wanted = self.settings.command_line_flag.lower()
        return any(arg.startswith("-") and arg[1:].lower() == wanted for arg in argv)

    def startup(self, argv: Sequence[str] | None = None) -> bool:
        """Update translation sheets if the settings ask for it, then load tables.

        Returns True if an update of the sheets was run.
        """
        args = list(sys.argv[1:] if argv is None else argv)
        s = self.settings
        has_flag = not s.update_locs_with_command_line_flag or self._has_command_line_flag(args)
        enabled = s.update_locs_in_shipping_builds if self.shipping else s.update_locs_in_debug_builds
        do_update = enabled and has_flag
        if do_update:
            try:
                self.localization.update_translations()
            except LocalizationError as error:
                LOGGER.error("%s", error)
        self.reload_localizations()
        return do_update

    def shutdown(self) -> None:
        """Unregister every table this runtime loaded."""
        self.unload_localizations()

    def _load_table(self, table_id: str, path: str) -> None:
        self.table_ids.append(table_id)
        try:
            self.registry.load_from_file(
                table_id, self.settings.stringtable_namespace, self._resolve(path)
            )
        except LocalizationError as error:
            LOGGER.error("%s", error)

    def reload_localizations(self) -> None:
        """Load the primary sheet as the game table and as the primary fallback table."""
        self.unload_localizations()
        s = self.settings
        filename = self.localization.file_with_path_from_language_code(s.primary_language_code)
        self._load_table(s.stringtable_id, filename)
        # The primary language stays loaded as a fallback for keys missing elsewhere.
        self._load_table(s.primary_language_code, filename)

    def unload_localizations(self) -> None:
        """Unregister the tables loaded by this runtime."""
        for table_id in self.table_ids:
            self.registry.unregister(table_id)
        self.table_ids.clear()

    def text_from_table(self, table_name: str, key: str) -> str:
        """Return the text for ``key`` in ``table_name``.

        Raises MissingTextError, telling a missing table from a missing key.
        """
        table = self.registry.find(table_name)
        if table is None:
            LOGGER.error("Could not find string table '%s'", table_name)
            raise MissingTextError(
                f"Could not find string table '{table_name}'", f"(TNF:{table_name})"
            )
        text = table.find(key)
        if text is None:
            LOGGER.error("Could not find key '%s' in string table '%s'", key, table_name)
            raise MissingTextError(
                f"Could not find key '{key}' in string table '{table_name}'", f"(KNF:{key})"
            )
        return text

    def get_game_text(self, key: str) -> str:
        """Return the text for ``key`` from the game table, falling back to the primary one.

        If neither has it, the placeholder of the failed fallback lookup is returned.
        """
        try:
            return self.text_from_table(self.settings.stringtable_id, key)
        except MissingTextError:
            pass
        try:
            return self.text_from_table(self.settings.primary_language_code, key)
        except MissingTextError as error:
            return error.placeholder

    def has_text_in_table(self, table_name: str, key: str) -> bool:
        """Return whether ``table_name`` exists and holds ``key``."""
        table = self.registry.find(table_name)
        return table is not None and key in table

    def set_localization_from_file(self, path: str) -> LocaleInfo:
        """Load the sheet at ``path`` as the game table and switch to its culture."""
        s = self.settings
        self.registry.unregister(s.stringtable_id)
        self.registry.load_from_file(s.stringtable_id, s.stringtable_namespace, self._resolve(path))
        if s.stringtable_id not in self.table_ids:
            self.table_ids.append(s.stringtable_id)
        info = self.localization.culture_from_filename(path)
        self.current_culture = info.locale_code
        return info