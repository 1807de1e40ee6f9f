"""pypyr step: rank all agents for the customer profile in the context.

Context keys consumed:
    conn (sqlite3.Connection): An initialised metric store connection.
    customer_profile (dict): The five customer profile fields.
    config_path (str, optional): JSON scoring configuration file.
    preset (str, optional): Named preset, used when no config_path.

Context keys produced:
    ranking (RankingResult): The ranked agents with the profile echo.
"""

import logging
import sqlite3

from agent_ranker.models import CustomerProfile
from agent_ranker.scoring.config import get_preset, load_config
from agent_ranker.scoring.engine import rank_agents_from_db

logger = logging.getLogger(__name__)


def run_step(context: dict) -> None:
    """pypyr entry-point.

    Validation and configuration errors propagate so pypyr fails the
    pipeline instead of producing a partial ranking.
    """
    conn: sqlite3.Connection = context["conn"]
    profile = CustomerProfile.from_dict(context["customer_profile"])

    config_path = context.get("config_path")
    if config_path:
        config = load_config(config_path)
    else:
        config = get_preset(context.get("preset", "refined"))

    ranking = rank_agents_from_db(conn, profile, config)
    context["ranking"] = ranking

    logger.info(
        "Ranked %d agents for %s", len(ranking.agents), profile.customer_name
    )
