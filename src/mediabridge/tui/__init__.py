"""mediabridge terminal UI."""
