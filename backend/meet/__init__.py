"""Meet rooms backend application."""
