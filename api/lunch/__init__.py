"""School lunch ordering service."""
