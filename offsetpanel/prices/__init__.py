"""Price table container and entry validation."""
