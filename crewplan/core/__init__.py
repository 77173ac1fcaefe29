"""Core configuration and observability."""
