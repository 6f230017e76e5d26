"""Application services for the check-in pipeline."""
