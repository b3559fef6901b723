"""Natural-language query understanding.

Extractors turn free text into typed concepts, the parser collects them into a `ParsedQuery`, and
the mapper and builder turn that into a search query in the card search DSL.
"""
