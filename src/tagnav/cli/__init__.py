"""TagNav CLI."""
