"""YAML-backed rate schedules and their validation helpers."""
