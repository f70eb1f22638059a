# locsheet

Localization kept in plain CSV string tables, one file per language, with
tools to keep every translation in step with the primary language.

Each localization file has the header

    Key,SourceString,Comment,Primary,Status

and is named from a prefix, a language code and a suffix, for example
`loc_fr.csv`. The primary language file (by default
`Localization/loc_en.csv` under the content directory) is the reference
every other file is checked against.

## Modules

- `locsheet.settings` — `LocalizationSettings` holds the primary language
  code, the primary localization directory and any additional ones
  (`LocPath` with a `PathRoot`), the filename prefix and suffix, the primary
  and allowed extensions, the `QuotingPolicy`, and the status markers written
  into the `Status` column (`New Entry`, `Modified Entry: was '...'`,
  `Deprecated Entry` by default). `validate()` fills in an empty extension,
  language code or command-line flag, strips leading/trailing `/` and a
  leading `Game/` from the primary directory, and returns whether anything
  changed.
- `locsheet.csvformat` — `parse_csv(text)` splits text into rows of cells,
  handling quoted cells with commas, line breaks and `""`;
  `lazy_wrap(text, force_wrap)` quotes a value when forced or when it holds a
  quote, comma or line break (an empty value is never quoted);
  `escape_quotes(text)` doubles quotation marks.
- `locsheet.localization` — `Localization(settings, content_dir)` finds
  sheets, reads them into `LocaleData` of `LocalizationEntry` rows, and
  writes them back. `update_translations()` rewrites every non-primary sheet
  to follow the primary one and returns the paths it rewrote:
  - keys missing from a translation are added, filled with the primary text
    and marked new (the `_LocMeta_Author` key gets `Unknown` instead);
  - entries whose primary text changed are marked modified, keeping the old
    primary text;
  - keys no longer in the primary sheet are marked deprecated and dropped on
    write unless `preserve_deprecated_lines` is set;
  - entries follow the order of the primary sheet, deprecated ones after.

  It also offers `localization_stats(filename)` (counts per `EntryStatus`),
  `available_localizations()` (a `LocaleInfo` per sheet, with a native
  language name for common codes), `locale_from_preferences(preferred)` and
  `write_csv(entries, filename)`. Unreadable files and bad headers raise
  `LocalizationError`.
- `locsheet.runtime` — `StringTable`, `StringTableRegistry` and
  `LocalizationRuntime`. The runtime loads the primary sheet as the game
  table and as a fallback table; `get_game_text(key)` looks in the game
  table, then the fallback, and returns `(KNF:key)` for a missing key or
  `(TNF:table)` for a missing table. `text_from_table` raises
  `MissingTextError` instead. `set_localization_from_file(path)` swaps the
  game table for another sheet.
- `locsheet.stats` — `StatsParser` counts entry states of several sheets on
  a background thread and reports each through a callback; `stop()` halts
  it before the next sheet.
- `locsheet.statstable` — `StatsTable` lists every available sheet as a
  `StatEntry` row (locale code, language, path, normal/new/modified/
  deprecated counts, total without deprecated) and fills it in using a
  `StatsParser`. `StatEntry.column_text(column)` gives each cell's text.

## Example

```python
from pathlib import Path

from locsheet.settings import LocalizationSettings
from locsheet.localization import Localization
from locsheet.runtime import LocalizationRuntime

settings = LocalizationSettings()
content = Path("Content")

loc = Localization(settings, content)
loc.update_translations()          # sync every loc_*.csv with loc_en.csv

for info in loc.available_localizations():
    print(info.locale_code, info.localized_name, info.file_path)

runtime = LocalizationRuntime(settings, content, shipping=False)
runtime.startup([])
print(runtime.get_game_text("Hello_World"))
# paths are relative to the content directory
runtime.set_localization_from_file("Localization/loc_fr.csv")
print(runtime.get_game_text("Hello_World"))
runtime.shutdown()
```

`startup(argv)` updates the sheets only when the settings allow it for the
kind of build (`update_locs_in_shipping_builds` or
`update_locs_in_debug_builds`) and, if `update_locs_with_command_line_flag`
is set, when `argv` holds `-UpdateLocalization` (or `-` followed by whatever
`command_line_flag` is, compared without regard to case). With `argv=None`
it looks at `sys.argv`.

## What it does not do

locsheet is a library only. It installs no command, has no editor or
window for browsing the statistics (the `StatsTable` rows are plain data),
does not save settings to disk, and does not watch files for changes.

## Tests

    pip install -e .[test]
    pytest