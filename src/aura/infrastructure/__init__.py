"""Infrastructure layer: persistence, providers, and observability."""
