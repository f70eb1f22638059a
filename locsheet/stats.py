"""Counting entry states of several sheets on a background thread."""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable

from locsheet.localization import EntryStatus, Localization, LocalizationError
from locsheet.settings import LOGGER

StatsCallback = Callable[[str, dict[EntryStatus, int]], None]


class StatsParser:
    """Collects per-status counts for each path and reports them one by one.

    ``on_complete`` is called with the path and its counts; a sheet that cannot
    be read is reported with empty counts.
    """

    def __init__(
        self,
        localization: Localization,
        paths: Iterable[str],
        on_complete: StatsCallback | None = None,
    ) -> None:
        self.localization = localization
        self.paths = list(paths)
        self.on_complete = on_complete
        self.completed = False
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        """Run the parser on a background thread."""
        if self._thread is not None:
            raise RuntimeError("StatsParser has already been started")
        self._thread = threading.Thread(target=self.run, name="StatsParser", daemon=True)
        self._thread.start()

    def run(self) -> bool:
        """Process every path in the calling thread; return True if all were processed."""
        for path in self.paths:
            if self._stop.is_set():
                return False
            try:
                stats = self.localization.localization_stats(path)
            except LocalizationError as error:
                LOGGER.error("%s", error)
                stats = {}
            if self.on_complete is not None:
                self.on_complete(path, stats)
        self.completed = True
        return True

    def stop(self) -> None:
        """Ask the parser to stop before the next path."""
        self._stop.set()

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the background thread; return True if it is no longer running."""
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()