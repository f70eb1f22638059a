from pathlib import Path

import pytest

from locsheet.localization import EntryStatus, Localization
from locsheet.settings import LocalizationSettings
from locsheet.stats import StatsParser

SHEET = (
    "Key,SourceString,Comment,Primary,Status\r\n"
    "A,a,,a,\r\n"
    "B,b,,b,New Entry\r\n"
    "C,c,,c,\"Modified Entry: was 'x'\"\r\n"
    "D,d,,d,Deprecated Entry\r\n"
    "E,e,,e,New Entry\r\n"
)


def _write(path: Path, text: str) -> str:
    with open(path, "w", encoding="utf-8", newline="") as handle:
        handle.write(text)
    return str(path)


@pytest.fixture
def localization(tmp_path):
    return Localization(LocalizationSettings(), tmp_path)


def test_run_reports_counts(localization, tmp_path):
    path = _write(tmp_path / "loc_fr.csv", SHEET)
    results = []
    parser = StatsParser(localization, [path], lambda p, s: results.append((p, s)))
    assert parser.run() is True
    assert parser.completed is True
    assert results == [
        (
            path,
            {
                EntryStatus.NONE: 1,
                EntryStatus.NEW: 2,
                EntryStatus.MODIFIED: 1,
                EntryStatus.DEPRECATED: 1,
            },
        )
    ]


def test_background_thread_matches_direct_stats(localization, tmp_path):
    first = _write(tmp_path / "loc_fr.csv", SHEET)
    second = _write(tmp_path / "loc_de.csv", "Key,SourceString,Comment,Primary,Status\r\nA,a,,a,\r\n")
    results = {}
    parser = StatsParser(localization, [first, second], lambda p, s: results.__setitem__(p, s))
    parser.start()
    assert parser.join(5) is True
    assert parser.completed is True
    assert results == {
        first: localization.localization_stats(first),
        second: localization.localization_stats(second),
    }


def test_unreadable_file_reports_empty_counts(localization, tmp_path):
    missing = str(tmp_path / "loc_xx.csv")
    results = []
    parser = StatsParser(localization, [missing], lambda p, s: results.append((p, s)))
    assert parser.run() is True
    assert results == [(missing, {})]


def test_stop_before_run_processes_nothing(localization, tmp_path):
    path = _write(tmp_path / "loc_fr.csv", SHEET)
    results = []
    parser = StatsParser(localization, [path], lambda p, s: results.append(p))
    parser.stop()
    assert parser.run() is False
    assert results == []
    assert parser.completed is False


def test_start_twice_raises(localization):
    parser = StatsParser(localization, [])
    parser.start()
    assert parser.join(5) is True
    with pytest.raises(RuntimeError):
        parser.start()


def test_join_without_start(localization):
    parser = StatsParser(localization, ["anything.csv"])
    assert parser.join() is True
    assert parser.completed is False