"""Loading, updating and writing localization sheets."""

from __future__ import annotations

import dataclasses
import enum
import os
import stat
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass

from locsheet.csvformat import escape_quotes, lazy_wrap, parse_csv
from locsheet.settings import LOGGER, LocalizationSettings, PathRoot, QuotingPolicy

HEADER = "Key,SourceString,Comment,Primary,Status"
LINE_END = "\r\n"
AUTHOR_KEY = "_LocMeta_Author"

# Native names shown for locale codes that are recognised; others show the raw code.
NATIVE_LANGUAGE_NAMES: Mapping[str, str] = {
    "ar": "العربية",
    "cs": "čeština",
    "da": "dansk",
    "de": "Deutsch",
    "el": "Ελληνικά",
    "en": "English",
    "es": "español",
    "fi": "suomi",
    "fr": "français",
    "hu": "magyar",
    "it": "italiano",
    "ja": "日本語",
    "ko": "한국어",
    "nl": "Nederlands",
    "no": "norsk",
    "pl": "polski",
    "pt": "português",
    "ro": "română",
    "ru": "русский",
    "sv": "svenska",
    "th": "ไทย",
    "tr": "Türkçe",
    "uk": "українська",
    "zh": "中文",
}


class EntryStatus(enum.Enum):
    """State of a sheet entry relative to the primary sheet."""

    NONE = "none"
    NEW = "new"
    MODIFIED = "modified"
    DEPRECATED = "deprecated"


class LocalizationError(Exception):
    """Raised when a sheet cannot be read, parsed or written."""


@dataclass(frozen=True)
class LocaleInfo:
    """A localization file that was found, with its locale code and display name."""

    locale_code: str
    localized_name: str
    file_path: str


@dataclass
class LocalizationEntry:
    """One row of a sheet."""

    key: str = ""
    translation: str = ""
    comment: str = ""
    primary: str = ""
    old_primary: str = ""  # not stored as a column of its own
    status: EntryStatus = EntryStatus.NONE


class LocaleData:
    """Entries of one sheet in file order, with a lookup from key to position."""

    def __init__(self, entries: Iterable[LocalizationEntry] = ()) -> None:
        self.entries: list[LocalizationEntry] = list(entries)
        self.key_to_index: dict[str, int] = {}
        for index, entry in enumerate(self.entries):
            if entry.key in self.key_to_index:
                LOGGER.warning("Duplicate key found! Line: %d, Key '%s'", index, entry.key)
            else:
                self.key_to_index[entry.key] = index

    def entry_for(self, key: str) -> LocalizationEntry | None:
        """Return the first entry with ``key``, or None."""
        index = self.key_to_index.get(key)
        return None if index is None else self.entries[index]

    def __contains__(self, key: object) -> bool:
        return key in self.key_to_index

    def __iter__(self) -> Iterator[LocalizationEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


def _split_name(path: str) -> tuple[str, str]:
    """Return the base name without extension and the extension without dot."""
    name = os.path.basename(path.replace("\\", "/"))
    base, ext = os.path.splitext(name)
    return base, ext[1:]


def _left_chop(text: str, count: int) -> str:
    """Drop ``count`` characters from the end of ``text``."""
    return text[: max(len(text) - count, 0)]


class Localization:
    """Finds sheets under a content directory and keeps translations in step with the primary."""

    def __init__(self, settings: LocalizationSettings, content_dir: str | os.PathLike) -> None:
        self.settings = settings
        self.content_dir = os.fspath(content_dir)

    def _resolve(self, path: str) -> str:
        return os.path.join(self.content_dir, path)

    def _roots(self) -> dict[PathRoot, str]:
        content = os.path.abspath(self.content_dir)
        home = os.path.expanduser("~")
        settings_dir = os.environ.get("LOCALAPPDATA") or os.environ.get(
            "XDG_CONFIG_HOME", os.path.join(home, ".config")
        )
        return {
            PathRoot.CONTENT_DIR: content,
            PathRoot.PROJECT_DIR: os.path.dirname(content),
            PathRoot.USER_DIR: home,
            PathRoot.USER_SETTINGS_DIR: settings_dir,
        }

    def _matches(self, filename: str) -> bool:
        base, ext = _split_name(filename)
        prefix = self.settings.filename_prefix
        suffix = self.settings.filename_suffix
        return (
            self.settings.is_valid_extension(ext)
            and (not prefix or base.startswith(prefix))
            and (not suffix or base.endswith(suffix))
        )

    def all_localization_files(self) -> list[str]:
        """Return every sheet in the search directories, relative to the content directory."""
        roots = self._roots()
        directories = [self.settings.primary_localization_directory]
        directories.extend(
            extra.directory_path(roots) for extra in self.settings.additional_localization_directories
        )
        files: list[str] = []
        for directory in directories:
            top = os.path.join(self.content_dir, directory)
            for dirpath, dirnames, filenames in os.walk(top):
                dirnames.sort()
                for filename in sorted(filenames):
                    if not self._matches(filename):
                        continue
                    full = os.path.join(dirpath, filename)
                    try:
                        relative = os.path.relpath(full, self.content_dir)
                    except ValueError:
                        relative = full
                    files.append(relative.replace(os.sep, "/"))
        return files

    def filename_from_language_code(self, language_code: str) -> str:
        """Return the sheet file name expected for ``language_code``."""
        s = self.settings
        return f"{s.filename_prefix}{language_code}{s.filename_suffix}.{s.primary_extension}"

    def file_with_path_from_language_code(self, language_code: str) -> str:
        """Return the sheet path for ``language_code`` within the primary directory."""
        return (
            f"{self.settings.primary_localization_directory}/"
            f"{self.filename_from_language_code(language_code)}"
        )

    def update_translations(self) -> list[str]:
        """Bring every translation sheet in line with the primary one.

        Returns the paths of the sheets that were rewritten.
        """
        primary_path = self.file_with_path_from_language_code(self.settings.primary_language_code)
        primary = self.load_locale_data(primary_path)
        if not primary.entries:
            raise LocalizationError(f"No entries found in primary sheet '{primary_path}'")

        updated: list[str] = []
        for path in self.all_localization_files():
            try:
                if self.update_translation_file(path, primary):
                    updated.append(path)
            except LocalizationError as error:
                LOGGER.error("%s", error)
        return updated

    def update_translation_file(self, path: str, primary: LocaleData) -> bool:
        """Rewrite the sheet at ``path`` to follow ``primary``.

        New keys are added, changed primary text is marked modified, and keys that
        no longer exist are marked deprecated. Returns False if the sheet is the
        primary one or cannot be written.
        """
        culture = self.remove_prefix_suffix(path)
        if culture == self.settings.primary_language_code:
            return False

        resolved = self._resolve(path)
        if os.path.exists(resolved) and not os.access(resolved, os.W_OK):
            LOGGER.warning("Cannot write to read-only file")
            return False

        local = self.load_locale_data(path)
        if not local.entries:
            LOGGER.warning("No Entries found when loading %s", path)

        new_entries: list[LocalizationEntry] = []
        for primary_entry in primary.entries:
            old = local.entry_for(primary_entry.key) or LocalizationEntry()

            if not old.translation and primary_entry.translation:
                LOGGER.warning("%s missing key '%s', adding.", culture, primary_entry.key)
                # Show the primary text until someone translates the new key.
                translation = primary_entry.translation
                if primary_entry.key == AUTHOR_KEY:
                    translation = "Unknown"
                new_entry = LocalizationEntry(
                    key=primary_entry.key,
                    translation=translation,
                    primary=primary_entry.translation,
                    status=EntryStatus.NEW,
                )
            elif old.primary != primary_entry.translation:
                new_entry = dataclasses.replace(old, primary=primary_entry.translation)
                if old.primary:
                    LOGGER.warning(
                        "Lang %s: Modified key '%s'. Was '%s', now is '%s'",
                        culture, primary_entry.key, old.primary, primary_entry.translation,
                    )
                    new_entry.status = EntryStatus.MODIFIED
                    new_entry.old_primary = old.primary
            else:
                new_entry = dataclasses.replace(old)
            new_entries.append(new_entry)

        for entry in local.entries:
            if entry.key not in primary:
                LOGGER.warning("%s has unused key '%s', marking deprecated.", culture, entry.key)
                new_entries.append(dataclasses.replace(entry, status=EntryStatus.DEPRECATED))

        self.write_csv(new_entries, path)
        return True

    def _read(self, filename: str) -> str:
        try:
            with open(self._resolve(filename), encoding="utf-8-sig", newline="") as handle:
                return handle.read()
        except (OSError, UnicodeDecodeError) as error:
            raise LocalizationError(f"Failed to load file '{filename}'") from error

    def _parse_status(self, status: str) -> tuple[EntryStatus, str]:
        s = self.settings
        if status.startswith(s.deprecated_status):
            return EntryStatus.DEPRECATED, ""
        if status.startswith(s.modified_status_left):
            old = _left_chop(status[len(s.modified_status_left):], len(s.modified_status_right))
            return EntryStatus.MODIFIED, old
        if status.startswith(s.new_status):
            return EntryStatus.NEW, ""
        return EntryStatus.NONE, ""

    def load_locale_data(self, filename: str) -> LocaleData:
        """Read the sheet at ``filename`` into a LocaleData."""
        rows = parse_csv(self._read(filename))

        if rows:
            header = rows[0]
            problems = []
            if len(header) < 1 or header[0] != "Key":
                problems.append("Column 0 in header must be 'Key'")
            if len(header) < 2 or header[1] != "SourceString":
                problems.append("Column 1 in header must be 'SourceString'")
            if problems:
                for problem in problems:
                    LOGGER.error("%s", problem)
                raise LocalizationError(f"Invalid header in '{filename}': " + "; ".join(problems))

        entries: list[LocalizationEntry] = []
        for row in rows[1:]:
            if len(row) < 2 or not row[0]:
                entries.append(LocalizationEntry())
                continue
            entry = LocalizationEntry(
                key=row[0],
                translation=row[1],
                comment=row[2] if len(row) >= 3 else "",
            )
            if len(row) >= 5:
                entry.primary = row[3]
                entry.status, entry.old_primary = self._parse_status(row[4])
            entries.append(entry)
        return LocaleData(entries)

    def localization_stats(self, filename: str) -> dict[EntryStatus, int]:
        """Count the rows of each status in the sheet at ``filename``."""
        rows = parse_csv(self._read(filename))
        counts = {status: 0 for status in EntryStatus}
        for row in rows[1:]:
            if len(row) >= 5:
                status, _ = self._parse_status(row[4])
                counts[status] += 1
        return counts

    def _status_text(self, entry: LocalizationEntry) -> str:
        s = self.settings
        if entry.status is EntryStatus.DEPRECATED:
            return s.deprecated_status
        if entry.status is EntryStatus.MODIFIED:
            return f"{s.modified_status_left}{entry.old_primary}{s.modified_status_right}"
        if entry.status is EntryStatus.NEW:
            return s.new_status
        return ""

    def write_csv(self, entries: Iterable[LocalizationEntry], filename: str) -> None:
        """Write ``entries`` to ``filename`` as a sheet, quoting as the settings say."""
        force = self.settings.quoting_policy is QuotingPolicy.FORCE_QUOTED
        lines = [HEADER]
        for entry in entries:
            if entry.status is EntryStatus.DEPRECATED and not self.settings.preserve_deprecated_lines:
                continue
            cells = [
                escape_quotes(entry.translation),
                escape_quotes(entry.comment),
                escape_quotes(entry.primary),
                escape_quotes(self._status_text(entry)),
            ]
            lines.append(
                ",".join([escape_quotes(entry.key)] + [lazy_wrap(cell, force) for cell in cells])
            )

        resolved = self._resolve(filename)
        try:
            if os.path.exists(resolved) and not os.access(resolved, os.W_OK):
                os.chmod(resolved, os.stat(resolved).st_mode | stat.S_IWUSR)
            with open(resolved, "w", encoding="utf-8", newline="") as handle:
                handle.write("".join(line + LINE_END for line in lines))
        except OSError as error:
            raise LocalizationError(f'Unable to open csv file "{filename}".') from error

    def available_localizations(self) -> list[LocaleInfo]:
        """Return a LocaleInfo for every sheet found."""
        return [self.culture_from_filename(path) for path in self.all_localization_files()]

    def locale_from_preferences(self, preferred: Iterable[str] | None = None) -> LocaleInfo | None:
        """Return the first available localization matching the preferred cultures.

        ``preferred`` holds culture names such as ``fr-FR``; when None, the
        environment's language settings are used.
        """
        cultures = list(preferred) if preferred is not None else _system_cultures()
        available = self.available_localizations()
        for culture in cultures:
            name = culture.replace("_", "-")
            if name in ("zh-CN", "zh-TW"):
                locale_name = "cn_HANS"
            else:
                locale_name = name.split("-", 1)[0].lower()
            for info in available:
                if info.locale_code == locale_name:
                    return info
        return None

    def remove_prefix_suffix(self, file_with_extension: str) -> str:
        """Strip directory, extension, and the configured prefix and suffix lengths."""
        name, _ = _split_name(file_with_extension)
        if self.settings.filename_prefix:
            name = name[len(self.settings.filename_prefix):]
        if self.settings.filename_suffix:
            name = _left_chop(name, len(self.settings.filename_suffix))
        return name

    def culture_from_filename(self, file_with_path: str) -> LocaleInfo:
        """Describe the sheet at ``file_with_path``."""
        code = self.remove_prefix_suffix(file_with_path)
        name = NATIVE_LANGUAGE_NAMES.get(code.lower(), code)
        return LocaleInfo(locale_code=code, localized_name=name, file_path=file_with_path)


def _system_cultures() -> list[str]:
    cultures: list[str] = []
    for variable in ("LANGUAGE", "LC_ALL", "LC_MESSAGES", "LANG"):
        for value in os.environ.get(variable, "").split(":"):
            value = value.split(".", 1)[0].split("@", 1)[0]
            if value and value not in ("C", "POSIX") and value not in cultures:
                cultures.append(value)
    return cultures