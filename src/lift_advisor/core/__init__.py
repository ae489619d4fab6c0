"""Recommendation engines and domain models."""
