"""Survey response aggregation and insight engine."""
