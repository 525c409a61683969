"""
StorageBackend implementations.

- memory.py: dict-backed, for demos and tests
- sqlite_backend.py: one SQLite row per collection
- json_backend.py: one JSON file per collection
- firebase.py: Firebase Realtime Database REST API (httpx)
"""
