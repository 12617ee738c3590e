"""Tool providers."""
