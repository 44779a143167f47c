"""The HTTP face of the ID generator."""
