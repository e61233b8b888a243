"""HTTP surface and shared models for the workflow graph engine."""
