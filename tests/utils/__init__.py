"""Tests for utility modules.

Filter compilation:
    - Operator parsing and validation
    - SQL predicates and bound parameters
    - Promoted metadata columns

Query building:
    - Similarity search statements per distance strategy
    - Vector literals and in-database embedding calls

Configuration:
    - YAML loading and environment variable resolution
    - Logger setup
"""
