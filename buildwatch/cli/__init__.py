"""buildwatch command-line interface."""
