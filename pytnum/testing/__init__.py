"""Hypothesis strategies for pytnum property tests."""
