"""Per-project autonomy (trust) documents and the high-risk audit trail."""
