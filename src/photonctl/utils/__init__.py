"""Output helpers shared by the CLI."""
