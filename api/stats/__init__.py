"""Engagement statistics."""
