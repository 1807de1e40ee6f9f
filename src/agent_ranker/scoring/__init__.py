"""Scoring sub-package for the agent-ranker project.

Exports the engine entry points so other modules can do::

    from agent_ranker.scoring import rank_agents
"""

from agent_ranker.scoring.engine import rank_agents, rank_agents_from_db

__all__ = ["rank_agents", "rank_agents_from_db"]
