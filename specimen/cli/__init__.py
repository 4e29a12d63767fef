"""Command line interface for specimen."""
