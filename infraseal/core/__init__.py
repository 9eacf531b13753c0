"""Core drift reconciliation engine."""
