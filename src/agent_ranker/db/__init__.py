"""Database sub-package for the agent-ranker project.

Exports the core database functions so that other modules can import
them directly from ``agent_ranker.db``:

    from agent_ranker.db import get_connection, init_db, fetch_snapshot
"""

from agent_ranker.db.manager import fetch_snapshot, get_connection, init_db

__all__ = ["fetch_snapshot", "get_connection", "init_db"]
