"""OffsetPanel web dashboard."""
