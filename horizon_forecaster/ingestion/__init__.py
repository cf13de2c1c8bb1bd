"""Loading input series from files."""
