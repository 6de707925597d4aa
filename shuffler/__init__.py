"""Shuffling distribution aggregation and significance statistics."""
