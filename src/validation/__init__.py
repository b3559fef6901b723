"""Card search DSL validation.

The validation layer tokenizes a DSL query, checks its structure, operators and values against an
operator registry, and proposes corrected queries for what it finds.
"""
