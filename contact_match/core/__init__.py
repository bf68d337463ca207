"""Matching engine: contact graphs, softassign, discretization, scoring."""
