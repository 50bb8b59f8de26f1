"""mediabridge - remote media keys and now-playing state over the network."""

__version__ = "0.1.0"
