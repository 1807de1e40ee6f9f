"""Ranking engine for the agent-ranker project.

Runs the full pipeline for one customer profile:

    validate -> aggregate -> normalize -> score -> rank

The engine is a pure function of the profile, the snapshot and the
config (apart from stamping the computation time), so concurrent calls
against the same snapshot need no coordination.
"""

import datetime
import logging
import sqlite3
from typing import Callable

from agent_ranker.db.manager import fetch_snapshot
from agent_ranker.models import (
    CustomerProfile,
    MetricSnapshot,
    RankingResult,
    validate_profile,
)
from agent_ranker.scoring.aggregator import build_performance_profiles
from agent_ranker.scoring.config import DEFAULT_CONFIG, ScoringConfig
from agent_ranker.scoring.normalizer import normalize_profiles
from agent_ranker.scoring.ranker import rank_scored_agents
from agent_ranker.scoring.scorer import score_agents

logger = logging.getLogger(__name__)


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def rank_agents(
    profile: CustomerProfile,
    snapshot: MetricSnapshot,
    config: ScoringConfig | None = None,
    clock: Callable[[], datetime.datetime] = _utcnow,
) -> RankingResult:
    """Rank every agent in *snapshot* for *profile*.

    Args:
        profile: The requesting customer.
        snapshot: A consistent read of the metric store.
        config: Scoring configuration; defaults to the ``refined`` preset.
        clock: Source of the computation timestamp.

    Returns:
        A :class:`RankingResult` echoing *profile*, best agent first.

    Raises:
        ValidationError: If *profile* is invalid.  Nothing is aggregated.
    """
    validate_profile(profile)
    config = config or DEFAULT_CONFIG

    profiles = build_performance_profiles(profile, snapshot)
    normalized = normalize_profiles(profiles, config)
    scored = score_agents(normalized, config)
    ranked = rank_scored_agents(scored)

    result = RankingResult(
        profile=profile,
        computed_at=clock(),
        config_name=config.name,
        agents=tuple(ranked),
    )
    logger.info(
        "Ranking for %s complete: %d agents with config %r",
        profile.customer_name, len(ranked), config.name,
    )
    return result


def rank_agents_from_db(
    conn: sqlite3.Connection,
    profile: CustomerProfile,
    config: ScoringConfig | None = None,
) -> RankingResult:
    """Validate *profile*, read a snapshot from *conn* and rank against it."""
    validate_profile(profile)
    snapshot = fetch_snapshot(conn)
    return rank_agents(profile, snapshot, config)
