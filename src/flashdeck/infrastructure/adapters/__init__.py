from .csv_source import CsvCardSource
from .state_store import InMemoryStateStore, JsonStateStore

__all__ = ["CsvCardSource", "InMemoryStateStore", "JsonStateStore"]
