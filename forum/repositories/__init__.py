"""
Persistence adapters.

These modules encapsulate how records are stored/retrieved (JSON fixtures,
DynamoDB or the SQL table store). Services depend on the StorageAdapter
interface rather than touching fixtures or table clients directly.
"""
