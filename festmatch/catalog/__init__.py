"""
Festival catalog package.

Responsibilities:
- Define the canonical Festival record and the read-only Catalog around it.
- Load festival records from JSON, CSV or in-memory sources.
- Drop malformed records with a warning instead of aborting the load.
"""
