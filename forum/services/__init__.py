"""
High-level use cases for the forum services.

Routers (FastAPI endpoints) call these services instead of talking to the
storage adapter directly.
"""
