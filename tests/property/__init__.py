"""
GRAPHE - Property-Based Testing Suite

Property-based testing using Hypothesis to discover edge cases and invariants
in marker-tree normalization, scripture assembly, and reference parsing.
"""
