"""
FastAPI routers.

The posts, threads and users services share one router builder
(records.build_router) parameterised by the entity definition.
"""
