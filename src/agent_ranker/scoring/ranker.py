"""Ranker for the agent-ranker scoring engine.

Orders scored agents by final score, best first.  Final scores are
rounded to ``TIE_DECIMALS`` places before comparison so floating-point
noise cannot split a tie; equal rounded scores fall back to ``agent_id``
ascending.  The sort key is a total order, so the same agents always
produce the same ranking whatever order they arrive in.  Ranks run 1..N
by position; no agent is dropped.
"""

import logging

from agent_ranker.models import ScoredAgent

logger = logging.getLogger(__name__)

TIE_DECIMALS = 9


def _sort_key(agent: ScoredAgent) -> tuple[float, int]:
    return (-round(agent.final_score, TIE_DECIMALS), agent.agent_id)


def rank_scored_agents(scored: list[ScoredAgent]) -> list[ScoredAgent]:
    """Sort *scored* best-to-worst and assign ranks starting at 1.

    Args:
        scored: Unranked agents from the scorer.

    Returns:
        New :class:`ScoredAgent` values with ``rank`` set.
    """
    ordered = sorted(scored, key=_sort_key)
    ranked = [agent.with_rank(rank) for rank, agent in enumerate(ordered, start=1)]

    if ranked:
        logger.info(
            "Ranked %d agents; top agent_id=%d (final=%.4f)",
            len(ranked), ranked[0].agent_id, ranked[0].final_score,
        )
    return ranked
