"""Data stores for persistence.

Stores handle:
- PostgreSQL: engine, sessions, optimistic transaction runner
- Redis: client, document keys, WATCH/MULTI/EXEC transaction runner

No business/ranking logic in stores - that belongs in schemas and services.
"""
