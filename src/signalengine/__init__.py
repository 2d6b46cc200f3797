"""Signal-generation engine for periodic market-price snapshots."""

__version__ = "0.1.0"
