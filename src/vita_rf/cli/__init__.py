"""Command-line interface for vita-rf."""
