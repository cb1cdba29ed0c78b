"""sdrbuild — build-and-repair installer for the ACARS SDR toolchain."""

__version__ = "0.1.0"
