"""Command-line interface for tops-decoder."""
