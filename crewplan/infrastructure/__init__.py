"""Infrastructure adapters for the scheduling engine."""
