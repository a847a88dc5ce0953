"""
Animal catalog access.

Responsibilities:
- Load the catalog file and validate rows into ``Animal`` values.
- Expose read-only lookups (by id, by id-set, full scan) to the engines.
"""
