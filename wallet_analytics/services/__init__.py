"""Computation services: reducers, batching, aggregation and the analytics facade."""
