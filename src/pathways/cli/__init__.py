"""Command-line interface for pathway exports."""
