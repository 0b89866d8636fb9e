"""Command line interface of envseal."""
