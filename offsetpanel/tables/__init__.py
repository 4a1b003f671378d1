"""Schema-driven editable tables."""
