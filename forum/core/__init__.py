"""
Core utilities shared across the forum services.

This package hosts configuration helpers (env vars, paths, storage backend
selection) and logging setup. Routers, adapters and scripts depend on these
primitives instead of reading the environment themselves.
"""
