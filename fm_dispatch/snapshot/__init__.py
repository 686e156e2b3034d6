"""
Snapshot providers: the read-only data sources behind the dispatch engine.

provider : SnapshotProvider protocol.
memory   : InMemorySnapshotProvider — plain collections (tests, embedding).
sqlite   : SqliteSnapshotProvider — local SQLite store via worker threads.
"""
