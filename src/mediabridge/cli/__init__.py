"""mediabridge command-line interface."""
