"""ReadMaster - feed ingestion, normalization and analysis."""

__version__ = "0.1.0"
