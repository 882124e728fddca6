"""
Adapter Factory
Centralizes the selection of storage and card source adapters.
"""

from flashdeck.application.config import AppConfig
from flashdeck.infrastructure.adapters.csv_source import CsvCardSource
from flashdeck.infrastructure.adapters.state_store import JsonStateStore


def get_state_store(config: AppConfig) -> JsonStateStore:
    """Returns the JSON-file store at the configured state path."""
    return JsonStateStore(config.state_file)


def get_card_source(config: AppConfig) -> CsvCardSource:
    """Returns the CSV card source for the configured data directory."""
    return CsvCardSource(config.data_dir)
