"""Data model for the agent-ranker project.

Defines the closed enumerations a customer profile is checked against,
the raw records read from the metric store, and the derived per-request
entities produced by the scoring pipeline.  Every class here is a frozen
dataclass: each pipeline stage builds new values instead of mutating the
ones it was handed.
"""

from __future__ import annotations

import dataclasses
import datetime
from dataclasses import dataclass, field
from typing import Any

from agent_ranker.errors import DataIntegrityError, ValidationError

# ---------------------------------------------------------------------------
# Closed enumerations
# ---------------------------------------------------------------------------

COMMUNICATION_METHODS: tuple[str, ...] = ("Phone Call", "Text")

LEAD_SOURCES: tuple[str, ...] = ("Organic", "Bought")

DESTINATIONS: tuple[str, ...] = ("Mars", "Europa", "Venus", "Titan", "Ganymede")

LAUNCH_LOCATIONS: tuple[str, ...] = (
    "Kennedy Space Center",
    "Dallas-Fort Worth Launch Complex",
    "New York Orbital Gateway",
    "Tokyo Spaceport Terminal",
    "Dubai Interplanetary Hub",
    "London Ascension Platform",
    "Sydney Stellar Port",
)

BOOKING_CONFIRMED = "Confirmed"
BOOKING_CANCELLED = "Cancelled"

RATING_MIN = 1.0
RATING_MAX = 5.0

_PROFILE_CHOICES: dict[str, tuple[str, ...]] = {
    "communication_method": COMMUNICATION_METHODS,
    "lead_source": LEAD_SOURCES,
    "destination": DESTINATIONS,
    "launch_location": LAUNCH_LOCATIONS,
}


# ---------------------------------------------------------------------------
# Request
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CustomerProfile:
    """The customer an agent pool is being ranked for."""

    communication_method: str
    lead_source: str
    destination: str
    launch_location: str
    customer_name: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CustomerProfile:
        """Build and validate a profile from a plain mapping.

        Raises:
            ValidationError: If a field is missing, empty, or outside
                its closed enumeration.
        """
        values = {}
        for name in (f.name for f in dataclasses.fields(cls)):
            value = data.get(name)
            if value is None:
                raise ValidationError(name, "field is required")
            values[name] = value
        profile = cls(**values)
        validate_profile(profile)
        return profile

    def to_dict(self) -> dict[str, str]:
        return dataclasses.asdict(self)


def validate_profile(profile: CustomerProfile) -> None:
    """Check every profile field against its closed enumeration.

    Raises:
        ValidationError: Naming the first offending field.
    """
    for name, choices in _PROFILE_CHOICES.items():
        value = getattr(profile, name)
        if not isinstance(value, str) or not value:
            raise ValidationError(name, "field is required")
        if value not in choices:
            raise ValidationError(
                name, f"{value!r} is not one of {', '.join(choices)}"
            )

    name = profile.customer_name
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("customer_name", "must not be empty")


# ---------------------------------------------------------------------------
# Metric store records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AgentRecord:
    agent_id: int
    name: str
    average_customer_service_rating: float
    department_name: str | None
    years_of_service: int


@dataclass(frozen=True)
class BookingRecord:
    booking_id: int
    assignment_id: int
    destination: str
    booking_status: str


@dataclass(frozen=True)
class AssignmentRecord:
    assignment_id: int
    agent_id: int
    lead_source: str
    communication_method: str
    booking: BookingRecord | None = None


@dataclass(frozen=True)
class MetricSnapshot:
    """A consistent read of the metric store taken for one request."""

    agents: tuple[AgentRecord, ...]
    assignments: tuple[AssignmentRecord, ...] = ()


# ---------------------------------------------------------------------------
# Derived per-request entities
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AgentPerformanceProfile:
    """One agent's history, conditioned on the requesting customer.

    The three conditional ratings are ``None`` when the agent has no
    qualifying history for that dimension.
    """

    agent_id: int
    name: str
    department_name: str | None
    rating: float
    years_of_service: int
    lead_source_rating: float | None = None
    destination_rating: float | None = None
    communication_rating: float | None = None
    total_bookings: int = 0
    confirmed_bookings: int = 0
    cancelled_bookings: int = 0
    cancellation_rate: float = field(init=False)

    def __post_init__(self) -> None:
        counts = (self.total_bookings, self.confirmed_bookings,
                  self.cancelled_bookings)
        if min(counts) < 0:
            raise DataIntegrityError(
                f"agent_id={self.agent_id}: negative booking count {counts}"
            )
        if self.confirmed_bookings + self.cancelled_bookings > self.total_bookings:
            raise DataIntegrityError(
                f"agent_id={self.agent_id}: confirmed ({self.confirmed_bookings})"
                f" + cancelled ({self.cancelled_bookings}) exceeds total"
                f" ({self.total_bookings})"
            )

        if self.total_bookings > 0:
            rate = self.cancelled_bookings / self.total_bookings
        else:
            rate = 0.0
        object.__setattr__(self, "cancellation_rate", rate)


@dataclass(frozen=True)
class ScoredAgent:
    """A performance profile enriched with normalized fields and scores."""

    profile: AgentPerformanceProfile
    normalized_service_years: float
    normalized_trip_volume: float
    base_score: float
    final_score: float
    rank: int | None = None

    @property
    def agent_id(self) -> int:
        return self.profile.agent_id

    @property
    def name(self) -> str:
        return self.profile.name

    @property
    def cancellation_rate(self) -> float:
        return self.profile.cancellation_rate

    def with_rank(self, rank: int) -> ScoredAgent:
        return dataclasses.replace(self, rank=rank)

    def to_dict(self) -> dict[str, Any]:
        p = self.profile
        return {
            "rank": self.rank,
            "agent_id": p.agent_id,
            "name": p.name,
            "department_name": p.department_name,
            "rating": p.rating,
            "years_of_service": p.years_of_service,
            "lead_source_rating": p.lead_source_rating,
            "destination_rating": p.destination_rating,
            "communication_rating": p.communication_rating,
            "total_bookings": p.total_bookings,
            "confirmed_bookings": p.confirmed_bookings,
            "cancelled_bookings": p.cancelled_bookings,
            "cancellation_rate": p.cancellation_rate,
            "normalized_service_years": self.normalized_service_years,
            "normalized_trip_volume": self.normalized_trip_volume,
            "base_score": self.base_score,
            "final_score": self.final_score,
        }


@dataclass(frozen=True)
class RankingResult:
    """Response envelope: the ranked agents plus what produced them."""

    profile: CustomerProfile
    computed_at: datetime.datetime
    config_name: str
    agents: tuple[ScoredAgent, ...]

    def top(self, n: int) -> tuple[ScoredAgent, ...]:
        return self.agents[:n]

    def to_dict(self) -> dict[str, Any]:
        return {
            "customer_profile": self.profile.to_dict(),
            "computed_at": self.computed_at.isoformat(),
            "config": self.config_name,
            "agents": [agent.to_dict() for agent in self.agents],
        }
