"""OffsetPanel - price management dashboard for offset printing services."""

__version__ = "1.0.0"
