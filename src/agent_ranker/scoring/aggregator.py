"""Performance aggregator for the agent-ranker scoring engine.

Builds one :class:`AgentPerformanceProfile` per agent for a single
customer profile.  Three conditional ratings record whether the agent
has history matching the customer's lead source, communication method
and destination; booking volume and cancellation counts are agent-wide
and ignore the request entirely.
"""

import logging
from collections import defaultdict
from statistics import fmean

from agent_ranker.errors import DataIntegrityError
from agent_ranker.models import (
    BOOKING_CANCELLED,
    BOOKING_CONFIRMED,
    RATING_MAX,
    RATING_MIN,
    AgentPerformanceProfile,
    AgentRecord,
    AssignmentRecord,
    CustomerProfile,
    MetricSnapshot,
)

logger = logging.getLogger(__name__)


def build_performance_profiles(
    profile: CustomerProfile, snapshot: MetricSnapshot
) -> list[AgentPerformanceProfile]:
    """Aggregate each agent's history conditioned on *profile*.

    Every valid agent record yields exactly one profile, including agents
    with no assignments at all.  Records that fail an integrity check are
    logged and left out of the aggregation.

    Matching rules per assignment:
        - lead_source == profile.lead_source           -> lead_source_rating
        - communication_method == profile.communication_method
                                                       -> communication_rating
        - linked booking destination == profile.destination
                                                       -> destination_rating

    Each conditional rating is the mean of the agent's overall rating over
    the qualifying records, or ``None`` if there are none.

    Args:
        profile: The (already validated) customer profile.
        snapshot: A consistent read of the metric store.

    Returns:
        Profiles ordered by ``agent_id`` ascending.
    """
    agents = _valid_agents(snapshot.agents)
    history = _assignments_by_agent(snapshot.assignments, agents)

    profiles = [
        _aggregate_agent(agent, history.get(agent_id, []), profile)
        for agent_id, agent in sorted(agents.items())
    ]

    logger.info(
        "Aggregated %d agent profiles for %s (lead_source=%s, "
        "communication=%s, destination=%s)",
        len(profiles), profile.customer_name, profile.lead_source,
        profile.communication_method, profile.destination,
    )
    return profiles


def _aggregate_agent(
    agent: AgentRecord,
    assignments: list[AssignmentRecord],
    profile: CustomerProfile,
) -> AgentPerformanceProfile:
    rating = agent.average_customer_service_rating

    lead_source_hits: list[float] = []
    communication_hits: list[float] = []
    destination_hits: list[float] = []
    total = confirmed = cancelled = 0

    for assignment in assignments:
        if assignment.lead_source == profile.lead_source:
            lead_source_hits.append(rating)
        if assignment.communication_method == profile.communication_method:
            communication_hits.append(rating)

        booking = assignment.booking
        if booking is None:
            continue
        total += 1
        if booking.booking_status == BOOKING_CONFIRMED:
            confirmed += 1
        elif booking.booking_status == BOOKING_CANCELLED:
            cancelled += 1
        if booking.destination == profile.destination:
            destination_hits.append(rating)

    result = AgentPerformanceProfile(
        agent_id=agent.agent_id,
        name=agent.name,
        department_name=agent.department_name,
        rating=rating,
        years_of_service=agent.years_of_service,
        lead_source_rating=_mean_or_none(lead_source_hits),
        destination_rating=_mean_or_none(destination_hits),
        communication_rating=_mean_or_none(communication_hits),
        total_bookings=total,
        confirmed_bookings=confirmed,
        cancelled_bookings=cancelled,
    )

    logger.debug(
        "agent_id=%d: assignments=%d bookings=%d/%d/%d (total/conf/canc) "
        "hits=%d/%d/%d (lead/comm/dest)",
        agent.agent_id, len(assignments), total, confirmed, cancelled,
        len(lead_source_hits), len(communication_hits), len(destination_hits),
    )
    return result


def _mean_or_none(values: list[float]) -> float | None:
    if not values:
        return None
    return fmean(values)


# ---------------------------------------------------------------------------
# Integrity filtering
# ---------------------------------------------------------------------------

def check_agent(agent: AgentRecord) -> None:
    """Raise :class:`DataIntegrityError` if *agent* cannot be scored."""
    rating = agent.average_customer_service_rating
    if rating is None or not RATING_MIN <= rating <= RATING_MAX:
        raise DataIntegrityError(
            f"agent_id={agent.agent_id}: rating {rating!r} is outside "
            f"[{RATING_MIN}, {RATING_MAX}]"
        )
    if agent.years_of_service is None or agent.years_of_service < 0:
        raise DataIntegrityError(
            f"agent_id={agent.agent_id}: years_of_service "
            f"{agent.years_of_service!r} is negative or missing"
        )


def _valid_agents(records) -> dict[int, AgentRecord]:
    agents: dict[int, AgentRecord] = {}
    for agent in records:
        try:
            if agent.agent_id in agents:
                raise DataIntegrityError(
                    f"agent_id={agent.agent_id}: duplicate agent record"
                )
            check_agent(agent)
        except DataIntegrityError as exc:
            logger.warning("Skipping agent record: %s", exc)
            continue
        agents[agent.agent_id] = agent
    return agents


def _assignments_by_agent(
    records, agents: dict[int, AgentRecord]
) -> dict[int, list[AssignmentRecord]]:
    seen: set[int] = set()
    by_agent: dict[int, list[AssignmentRecord]] = defaultdict(list)
    for assignment in records:
        try:
            if assignment.assignment_id in seen:
                raise DataIntegrityError(
                    f"assignment_id={assignment.assignment_id}: "
                    "duplicate assignment record"
                )
            if assignment.agent_id not in agents:
                raise DataIntegrityError(
                    f"assignment_id={assignment.assignment_id}: references "
                    f"unknown agent_id={assignment.agent_id}"
                )
        except DataIntegrityError as exc:
            logger.warning("Skipping assignment record: %s", exc)
            continue
        seen.add(assignment.assignment_id)
        by_agent[assignment.agent_id].append(assignment)
    return by_agent
