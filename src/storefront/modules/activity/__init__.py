"""Activity module: per-website event log."""
