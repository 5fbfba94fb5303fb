"""Domain rules: field parsing and status classification."""
