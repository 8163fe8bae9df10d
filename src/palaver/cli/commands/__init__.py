"""Palaver CLI subcommands."""
