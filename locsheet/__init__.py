"""CSV string-table localization with primary-language sync and statistics."""

__version__ = "0.1.0"

__all__ = ["settings", "csvformat", "localization", "runtime", "stats", "statstable"]