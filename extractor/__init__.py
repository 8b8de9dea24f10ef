"""Job text extractor: turns rendered job-posting pages into clean report text."""

__version__ = "0.1.0"
