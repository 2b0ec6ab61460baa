"""Advisory document validation."""
