"""
Persistent store.

- sqlite_store.py: ZenStore with four keyed collections, bulk merge, seeding, reset
"""
