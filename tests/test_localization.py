import pytest

from locsheet.localization import (
    EntryStatus,
    LocaleData,
    LocaleInfo,
    Localization,
    LocalizationEntry,
    LocalizationError,
)
from locsheet.settings import LocalizationSettings, QuotingPolicy

HEADER = "Key,SourceString,Comment,Primary,Status\n"


def write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as handle:
        handle.write(text)


def read(path):
    with open(path, encoding="utf-8", newline="") as handle:
        return handle.read()


@pytest.fixture
def loc(tmp_path):
    return Localization(LocalizationSettings(), tmp_path)


PARSE_CASES = {
    "Simple test": ("Hello_World,Salut world,", {"Hello_World": "Salut world"}),
    "Spaces in keys": ("Hello World,Salut world,", {"Hello World": "Salut world"}),
    "Quotes around keys": ('"Hello World",Salut world,', {"Hello World": "Salut world"}),
    "Quotes around keys with commas": ('"Hello, World",Salut world,', {"Hello, World": "Salut world"}),
    "Quotes around value with commas": ('Hello_World,"Salut, world",', {"Hello_World": "Salut, world"}),
    "No quotes around value with commas": ("Hello_World,Salut, world,", {"Hello_World": "Salut"}),
    "Quotes around value with newline": ('Hello_World,"Salut,\n world",', {"Hello_World": "Salut,\n world"}),
}


@pytest.mark.parametrize("name", sorted(PARSE_CASES))
def test_load_parse_cases(loc, tmp_path, name):
    body, expected = PARSE_CASES[name]
    write(tmp_path / "sheet.csv", HEADER + body)
    data = loc.load_locale_data("sheet.csv")
    for key, value in expected.items():
        assert data.entry_for(key).translation == value


def test_load_keys_are_case_sensitive(loc, tmp_path):
    write(tmp_path / "sheet.csv", HEADER + "hello_world,Salut world,")
    data = loc.load_locale_data("sheet.csv")
    assert data.entry_for("Hello_World") is None
    assert data.entry_for("hello_world").translation == "Salut world"


def test_load_status_columns(loc, tmp_path):
    write(
        tmp_path / "sheet.csv",
        HEADER
        + "A,a,c,pa,New Entry\n"
        + "B,b,,pb,Modified Entry: was 'Old'\n"
        + "C,c,,pc,Deprecated Entry\n"
        + "D,d,,pd,\n",
    )
    data = loc.load_locale_data("sheet.csv")
    assert [e.status for e in data] == [
        EntryStatus.NEW, EntryStatus.MODIFIED, EntryStatus.DEPRECATED, EntryStatus.NONE,
    ]
    assert data.entry_for("B").old_primary == "Old"
    assert data.entry_for("A").comment == "c"
    assert data.entry_for("A").primary == "pa"


def test_load_short_rows_become_empty_entries(loc, tmp_path):
    write(tmp_path / "sheet.csv", HEADER + "Lonely\n,empty key\nK,v\n")
    data = loc.load_locale_data("sheet.csv")
    assert len(data) == 3
    assert data.entries[0] == LocalizationEntry()
    assert data.entries[1] == LocalizationEntry()
    assert data.entry_for("K").translation == "v"


def test_load_invalid_header(loc, tmp_path):
    write(tmp_path / "sheet.csv", "Name,Value\nA,b\n")
    with pytest.raises(LocalizationError, match="Key"):
        loc.load_locale_data("sheet.csv")


def test_load_missing_file(loc):
    with pytest.raises(LocalizationError, match="Failed to load"):
        loc.load_locale_data("missing.csv")


def test_locale_data_duplicate_keys_keep_first():
    data = LocaleData([LocalizationEntry("A", "1"), LocalizationEntry("A", "2")])
    assert data.entry_for("A").translation == "1"
    assert data.key_to_index == {"A": 0}
    assert len(data) == 2


WRITE_CASES = {
    "Empty": ([], "Key,SourceString,Comment,Primary,Status\r\n"),
    "Basic": (
        [LocalizationEntry("Hello", "World", "Nice")],
        "Key,SourceString,Comment,Primary,Status\r\nHello,World,Nice,,\r\n",
    ),
    "With comma": (
        [LocalizationEntry("Hello", "World, yup", "Nice")],
        'Key,SourceString,Comment,Primary,Status\r\nHello,"World, yup",Nice,,\r\n',
    ),
}


@pytest.mark.parametrize("name", sorted(WRITE_CASES))
def test_write_csv(tmp_path, name):
    entries, expected = WRITE_CASES[name]
    settings = LocalizationSettings(
        quoting_policy=QuotingPolicy.ONLY_WHEN_NEEDED,
        preserve_deprecated_lines=False,
        deprecated_status="Deprecated",
        modified_status_left="Modified '",
        modified_status_right="'",
        new_status="New",
    )
    Localization(settings, tmp_path).write_csv(entries, "out.csv")
    assert read(tmp_path / "out.csv") == expected


def test_write_csv_statuses_and_deprecated(tmp_path):
    settings = LocalizationSettings(preserve_deprecated_lines=True)
    entries = [
        LocalizationEntry("A", "a", status=EntryStatus.NEW),
        LocalizationEntry("B", "b", old_primary="x", status=EntryStatus.MODIFIED),
        LocalizationEntry("C", "c", status=EntryStatus.DEPRECATED),
    ]
    Localization(settings, tmp_path).write_csv(entries, "out.csv")
    assert read(tmp_path / "out.csv") == (
        "Key,SourceString,Comment,Primary,Status\r\n"
        'A,"a",,,"New Entry"\r\n'
        "B,\"b\",,,\"Modified Entry: was 'x'\"\r\n"
        'C,"c",,,"Deprecated Entry"\r\n'
    )


FULL_LOOP_CASES = {
    "Single": 'Key,SourceString,Comment,Primary,Status\r\nFirstKey,"Salut","Just a comment","Hello",\r\n',
    "Quotes": 'Key,SourceString,Comment,Primary,Status\r\nFirstKey,"Hello, world","Just a comment","Hello",\r\n',
    "Backslash": 'Key,SourceString,Comment,Primary,Status\r\nFirstKey,"Hello\\ world","Just a comment","Hello",\r\n',
    "Double quote": (
        'Key,SourceString,Comment,Primary,Status\r\n'
        'FirstKey,"She said ""Hello"", then left.","Just a comment","Hello",\r\n'
    ),
}


@pytest.mark.parametrize("name", sorted(FULL_LOOP_CASES))
def test_full_loop_is_stable(loc, tmp_path, name):
    text = FULL_LOOP_CASES[name]
    path = tmp_path / "loc_fr.csv"
    write(path, text)
    primary = LocaleData([LocalizationEntry("FirstKey", "Hello", "")])
    for _ in range(3):
        assert loc.update_translation_file(str(path), primary) is True
        assert read(path) == text


def test_update_translation_file_new_modified_deprecated(loc, tmp_path):
    write(tmp_path / "loc_fr.csv", HEADER + "Greeting,Bonjour,c,Hello,\nOld,Vieux,,Old,\n")
    primary = LocaleData([
        LocalizationEntry("Greeting", "Hello there"),
        LocalizationEntry("Farewell", "Bye"),
        LocalizationEntry("_LocMeta_Author", "Studio"),
    ])
    assert loc.update_translation_file("loc_fr.csv", primary) is True
    data = loc.load_locale_data("loc_fr.csv")
    greeting = data.entry_for("Greeting")
    assert greeting.status is EntryStatus.MODIFIED
    assert greeting.old_primary == "Hello"
    assert greeting.primary == "Hello there"
    assert greeting.translation == "Bonjour"
    farewell = data.entry_for("Farewell")
    assert (farewell.translation, farewell.primary, farewell.status) == ("Bye", "Bye", EntryStatus.NEW)
    assert data.entry_for("_LocMeta_Author").translation == "Unknown"
    assert data.entry_for("Old") is None


def test_update_translation_file_preserves_deprecated(tmp_path):
    loc = Localization(LocalizationSettings(preserve_deprecated_lines=True), tmp_path)
    write(tmp_path / "loc_fr.csv", HEADER + "Old,Vieux,,Old,\n")
    primary = LocaleData([LocalizationEntry("Greeting", "Hello")])
    loc.update_translation_file("loc_fr.csv", primary)
    data = loc.load_locale_data("loc_fr.csv")
    assert data.entry_for("Old").status is EntryStatus.DEPRECATED
    assert data.entry_for("Greeting").status is EntryStatus.NEW


def test_update_translation_file_skips_primary(loc, tmp_path):
    write(tmp_path / "loc_en.csv", HEADER + "A,a,\n")
    assert loc.update_translation_file("loc_en.csv", LocaleData([LocalizationEntry("A", "a")])) is False
    assert read(tmp_path / "loc_en.csv") == HEADER + "A,a,\n"


def test_update_translations(loc, tmp_path):
    write(tmp_path / "Localization/loc_en.csv", HEADER + "Greeting,Hello,\n")
    write(tmp_path / "Localization/loc_fr.csv", HEADER)
    assert loc.update_translations() == ["Localization/loc_fr.csv"]
    assert read(tmp_path / "Localization/loc_fr.csv") == (
        "Key,SourceString,Comment,Primary,Status\r\n"
        'Greeting,"Hello",,"Hello","New Entry"\r\n'
    )


def test_update_translations_missing_primary(loc, tmp_path):
    write(tmp_path / "Localization/loc_fr.csv", HEADER)
    with pytest.raises(LocalizationError):
        loc.update_translations()


def test_localization_stats(loc, tmp_path):
    write(
        tmp_path / "s.csv",
        HEADER + "A,a,,p,New Entry\nB,b,,p,\nC,c,,p,\nD,d,,p,Deprecated Entry\nE,e\n",
    )
    assert loc.localization_stats("s.csv") == {
        EntryStatus.NONE: 2,
        EntryStatus.NEW: 1,
        EntryStatus.MODIFIED: 0,
        EntryStatus.DEPRECATED: 1,
    }


def test_localization_stats_missing_file(loc):
    with pytest.raises(LocalizationError):
        loc.localization_stats("nope.csv")


def test_all_localization_files(loc, tmp_path):
    for name in ["loc_en.csv", "loc_fr.txt", "other.csv", "loc_de.json", "sub/loc_es.csv"]:
        write(tmp_path / "Localization" / name, HEADER)
    assert sorted(loc.all_localization_files()) == [
        "Localization/loc_en.csv",
        "Localization/loc_fr.txt",
        "Localization/sub/loc_es.csv",
    ]


def test_filenames_from_language_code(loc):
    assert loc.filename_from_language_code("fr") == "loc_fr.csv"
    assert loc.file_with_path_from_language_code("fr") == "Localization/loc_fr.csv"


def test_remove_prefix_suffix(tmp_path):
    loc = Localization(LocalizationSettings(filename_suffix="_v2"), tmp_path)
    assert loc.remove_prefix_suffix("Localization/loc_de_v2.csv") == "de"


def test_culture_from_filename(loc):
    assert loc.culture_from_filename("Localization/loc_fr.csv") == LocaleInfo(
        "fr", "français", "Localization/loc_fr.csv"
    )
    assert loc.culture_from_filename("loc_xx.csv").localized_name == "xx"


def test_available_localizations_and_preferences(loc, tmp_path):
    for name in ["loc_en.csv", "loc_fr.csv", "loc_cn_HANS.csv"]:
        write(tmp_path / "Localization" / name, HEADER)
    codes = sorted(info.locale_code for info in loc.available_localizations())
    assert codes == ["cn_HANS", "en", "fr"]
    assert loc.locale_from_preferences(["de-DE", "fr-FR"]).locale_code == "fr"
    assert loc.locale_from_preferences(["zh-TW"]).locale_code == "cn_HANS"
    assert loc.locale_from_preferences(["ja-JP"]) is None