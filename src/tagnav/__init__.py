"""TagNav - component selector index and markup navigation for editors."""

__version__ = "0.1.0"
