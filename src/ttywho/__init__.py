"""ttywho - who is on which terminal, and what they are running."""

__version__ = "0.1.0"
