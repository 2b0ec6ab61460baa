"""Inter-task artifact handoff."""
