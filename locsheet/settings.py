"""Configuration for localization sheets and the directories they live in."""

from __future__ import annotations

import enum
import logging
import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field

LOGGER = logging.getLogger("locsheet")

_DUPLICATE_SLASHES = re.compile(r"/{2,}")


class QuotingPolicy(enum.Enum):
    """How values are quoted when a sheet is written."""

    # Wrap every non-empty value in quotation marks.
    FORCE_QUOTED = "force_quoted"
    # Quote only values that need it: fewer diff changes, more risk of runaway strings.
    ONLY_WHEN_NEEDED = "only_when_needed"


class PathRoot(enum.Enum):
    """The base directory an additional localization path is relative to."""

    PROJECT_DIR = "project_dir"
    CONTENT_DIR = "content_dir"
    USER_DIR = "user_dir"
    USER_SETTINGS_DIR = "user_settings_dir"


def _combine(*parts: str) -> str:
    """Join path parts with '/' and collapse repeated slashes."""
    joined = "/".join(part for part in parts if part)
    return _DUPLICATE_SLASHES.sub("/", joined)


@dataclass
class LocPath:
    """A directory given relative to one of the known roots."""

    root: PathRoot = PathRoot.CONTENT_DIR
    relative_path: str = ""

    def directory_path(self, roots: Mapping[PathRoot, str | os.PathLike]) -> str:
        """Resolve this path against the directory that ``roots`` gives for its root."""
        try:
            base = roots[self.root]
        except KeyError:
            raise KeyError(f"no directory known for root {self.root.name}") from None
        return _combine(os.fspath(base).replace("\\", "/"), self.relative_path)


@dataclass
class LocalizationSettings:
    """User-editable settings that control where sheets are found and how they are written."""

    # Language code of the primary language; every other translation is based on it.
    primary_language_code: str = "en"
    # Sheets are searched for in this directory, relative to the content directory.
    primary_localization_directory: str = "Localization"
    # Extra places to search, e.g. for fan translations.
    additional_localization_directories: list[LocPath] = field(default_factory=list)
    include_subdirectories: bool = True
    # A sheet's file name is prefix + language code + suffix.
    filename_prefix: str = "loc_"
    filename_suffix: str = ""
    primary_extension: str = "csv"
    allowed_extensions: list[str] = field(default_factory=lambda: ["txt"])
    create_backup: bool = True
    author_metadata_key: str = "_meta_author"
    quoting_policy: QuotingPolicy = QuotingPolicy.FORCE_QUOTED
    warn_on_long_key: int = 100
    warn_on_quote_fail: bool = True
    update_locs_in_shipping_builds: bool = False
    update_locs_in_debug_builds: bool = True
    # When true, sheets are only updated if the command-line flag is present.
    update_locs_with_command_line_flag: bool = True
    command_line_flag: str = "UpdateLocalization"
    # Keep keys that vanished from the primary sheet, marked deprecated, instead of dropping them.
    preserve_deprecated_lines: bool = False
    stringtable_id: str = "Game"
    stringtable_namespace: str = "Namespace"
    new_status: str = "New Entry"
    modified_status_left: str = "Modified Entry: was '"
    modified_status_right: str = "'"
    deprecated_status: str = "Deprecated Entry"

    def is_valid_extension(self, extension: str) -> bool:
        """Return whether files with ``extension`` (no dot) count as sheets."""
        return extension == self.primary_extension or extension in self.allowed_extensions

    def validate(self) -> bool:
        """Fill in missing values and normalise the primary directory.

        Returns True if anything was changed.
        """
        changed = False

        if not self.primary_extension:
            self.primary_extension = "csv"
            changed = True

        if not self.primary_language_code:
            self.primary_language_code = "en"
            changed = True

        directory = self.primary_localization_directory
        # A trailing slash would produce double slashes when paths are joined.
        if directory.endswith("/"):
            directory = directory[:-1]
            changed = True
        if directory.startswith("/"):
            directory = directory[1:]
            changed = True
        if directory.startswith("Game/"):
            directory = directory[len("Game/"):]
            changed = True
        self.primary_localization_directory = directory

        if self.update_locs_with_command_line_flag and not self.command_line_flag:
            self.command_line_flag = "UpdateLoc"
            changed = True

        return changed