"""pypyr step: show_ranking

Prints the ranked agents produced by ``rank_agents`` and closes the
database connection.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def run_step(context: dict) -> None:
    """Print the ranking table and close the DB connection.

    Expects the following keys in *context*:
        conn    -- open sqlite3 connection
        ranking -- RankingResult from the rank_agents step
        top     -- (optional) only print the best N agents
    """
    conn = context.get("conn")
    ranking = context.get("ranking")

    try:
        if ranking is None:
            logger.warning("show_ranking: no ranking in context")
            return

        agents = ranking.agents
        top = context.get("top")
        if top:
            agents = agents[:int(top)]

        separator = "-" * 62
        print(separator)
        print(f"  Customer : {ranking.profile.customer_name}")
        print(f"  Config   : {ranking.config_name}")
        print(f"  Computed : {ranking.computed_at.isoformat()}")
        print(separator)
        print(f"  {'#':<4} {'Agent':<28} {'Base':>7} {'Cancel':>7} {'Final':>7}")
        print(f"  {'---':<4} {'---':<28} {'---':>7} {'---':>7} {'---':>7}")
        for agent in agents:
            name = agent.name
            if len(name) > 28:
                name = name[:25] + "..."
            print(
                f"  {agent.rank:<4} {name:<28} {agent.base_score:>7.3f} "
                f"{agent.cancellation_rate:>7.1%} {agent.final_score:>7.3f}"
            )
        print(separator)
    finally:
        if conn is not None:
            conn.close()
            logger.info("Database connection closed by show_ranking step.")
