"""Core package of envseal."""
