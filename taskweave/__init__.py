"""Task-graph utilities: cycle detection, chunked parallel algorithms, parameterized compositions, debug logging and a live metrics dashboard."""

__version__ = "0.1.1"

__all__ = ["algorithms", "composition", "cycle_detection", "dashboard", "debug"]