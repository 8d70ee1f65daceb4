"""CLI argument handling and entry point."""
