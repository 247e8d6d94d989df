"""Internal implementation of the tag index. Not a public API."""
