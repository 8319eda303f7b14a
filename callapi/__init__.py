"""HTTP surface over the callcore aggregations."""
