"""job-board: job delivery and image resolution API for CI build workers."""

__version__ = "3.2.0"
