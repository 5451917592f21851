"""Command-line interface for the release engine."""
