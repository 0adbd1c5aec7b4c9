"""
Application Layer - Use Cases

Contains:
- search: multi-platform fan-out, normalization, deduplication, handle lookup
- report: profile report proxy
- session: client-side incremental search controller
"""
