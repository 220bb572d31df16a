"""CLI entrypoints for swap-quoter."""
