"""Scorer for the agent-ranker scoring engine.

Combines an agent's signals into a weighted base score, then applies the
cancellation-rate penalty:

    base_score  = sum(weight_i * signal_i)
    final_score = base_score * (1 - cancellation_rate)

The penalty is multiplicative, so a risky agent loses in proportion to
their own quality rather than by a fixed amount.
"""

import logging

from agent_ranker.models import AgentPerformanceProfile, ScoredAgent
from agent_ranker.scoring.config import CONDITIONAL_SIGNALS, ScoringConfig

logger = logging.getLogger(__name__)


def signal_values(
    profile: AgentPerformanceProfile,
    normalized_service_years: float,
    normalized_trip_volume: float,
    baseline_rating: float,
) -> dict[str, float]:
    """Return every scoreable signal for one agent.

    Absent conditional ratings are replaced by *baseline_rating*.
    """
    values = {
        "rating": profile.rating,
        "lead_source_rating": profile.lead_source_rating,
        "destination_rating": profile.destination_rating,
        "communication_rating": profile.communication_rating,
        "service_years": normalized_service_years,
        "trip_volume": normalized_trip_volume,
    }
    for signal in CONDITIONAL_SIGNALS:
        if values[signal] is None:
            values[signal] = baseline_rating
    return values


def calculate_base_score(values: dict[str, float], config: ScoringConfig) -> float:
    return sum(dim.weight * values[dim.signal] for dim in config.dimensions)


def calculate_final_score(base_score: float, cancellation_rate: float) -> float:
    return base_score * (1.0 - cancellation_rate)


def score_agent(
    profile: AgentPerformanceProfile,
    normalized_service_years: float,
    normalized_trip_volume: float,
    config: ScoringConfig,
) -> ScoredAgent:
    """Score a single normalized profile.

    Args:
        profile: Aggregated history for the agent.
        normalized_service_years: Tenure on the 1-5 scale.
        normalized_trip_volume: Confirmed bookings on the 1-5 scale.
        config: Weights, baseline and domains to score with.

    Returns:
        An unranked :class:`ScoredAgent`.
    """
    values = signal_values(
        profile,
        normalized_service_years,
        normalized_trip_volume,
        config.baseline_rating,
    )
    base_score = calculate_base_score(values, config)
    final_score = calculate_final_score(base_score, profile.cancellation_rate)

    logger.debug(
        "Scored agent_id=%d: base=%.4f final=%.4f (cancellation_rate=%.4f)",
        profile.agent_id, base_score, final_score, profile.cancellation_rate,
    )
    return ScoredAgent(
        profile=profile,
        normalized_service_years=normalized_service_years,
        normalized_trip_volume=normalized_trip_volume,
        base_score=base_score,
        final_score=final_score,
    )


def score_agents(
    normalized: list[tuple[AgentPerformanceProfile, float, float]],
    config: ScoringConfig,
) -> list[ScoredAgent]:
    return [
        score_agent(profile, service_years, trip_volume, config)
        for profile, service_years, trip_volume in normalized
    ]
