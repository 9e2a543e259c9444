"""Vectorization and weighting primitives."""
