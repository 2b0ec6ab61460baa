"""Hook runtime input records."""
