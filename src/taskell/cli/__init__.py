"""Command line: entrypoint, composition root, command registry and formatting."""
