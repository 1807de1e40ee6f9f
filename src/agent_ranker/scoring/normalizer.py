"""Normalizer for the agent-ranker scoring engine.

Maps raw bounded metrics (tenure, confirmed-booking count) onto the
1.0-5.0 rating scale by linear interpolation, then clamps the result so
values outside the configured domain can never escape the target range.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from agent_ranker.errors import ConfigurationError
from agent_ranker.models import AgentPerformanceProfile

logger = logging.getLogger(__name__)

TARGET_MIN = 1.0
TARGET_MAX = 5.0


@dataclass(frozen=True)
class NormalizationDomain:
    """The practical ``[minimum, maximum]`` range of a raw metric."""

    minimum: float
    maximum: float

    def __post_init__(self) -> None:
        if self.maximum <= self.minimum:
            raise ConfigurationError(
                f"normalization domain [{self.minimum}, {self.maximum}] "
                "must have maximum > minimum"
            )

    @classmethod
    def from_value(cls, value) -> NormalizationDomain:
        """Accept a domain, a ``[min, max]`` pair or a ``{"min", "max"}`` dict."""
        if isinstance(value, cls):
            return value
        try:
            if isinstance(value, dict):
                return cls(float(value["min"]), float(value["max"]))
            minimum, maximum = value
            return cls(float(minimum), float(maximum))
        except (KeyError, TypeError, ValueError) as exc:
            raise ConfigurationError(
                f"invalid normalization domain {value!r}: {exc}"
            ) from exc

    def as_list(self) -> list[float]:
        return [self.minimum, self.maximum]


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(value, upper))


def normalize(
    value: float,
    domain: NormalizationDomain,
    target_min: float = TARGET_MIN,
    target_max: float = TARGET_MAX,
) -> float:
    """Interpolate *value* from *domain* onto the target range and clamp.

    A value below ``domain.minimum`` maps to exactly *target_min*; one above
    ``domain.maximum`` maps to exactly *target_max*.

    Args:
        value: The raw metric.
        domain: Source interval for the interpolation.
        target_min: Lower end of the output scale.
        target_max: Upper end of the output scale.

    Returns:
        A float in ``[target_min, target_max]``.
    """
    span = domain.maximum - domain.minimum
    raw = target_min + (value - domain.minimum) * (target_max - target_min) / span
    return clamp(raw, target_min, target_max)


def observed_domain(values: list[int]) -> NormalizationDomain | None:
    """Build a domain from the min/max of *values*.

    Returns ``None`` when the values are empty or all equal, since such a
    pool has no spread to interpolate across.
    """
    if not values:
        return None
    low, high = min(values), max(values)
    if high <= low:
        return None
    return NormalizationDomain(float(low), float(high))


def trip_volume_domain(
    profiles: list[AgentPerformanceProfile], config
) -> NormalizationDomain:
    """Pick the confirmed-bookings domain for the current agent pool.

    In ``observed`` mode the pool's own min/max is used, falling back to
    the configured static domain when the pool is degenerate.
    """
    if config.trip_volume_mode == "observed":
        domain = observed_domain([p.confirmed_bookings for p in profiles])
        if domain is not None:
            return domain
        logger.debug(
            "Observed trip-volume domain is degenerate; using static %s",
            config.trip_volume_domain.as_list(),
        )
    return config.trip_volume_domain


def normalize_profiles(
    profiles: list[AgentPerformanceProfile], config
) -> list[tuple[AgentPerformanceProfile, float, float]]:
    """Attach normalized tenure and trip volume to each profile.

    Args:
        profiles: Output of the performance aggregator.
        config: A :class:`~agent_ranker.scoring.config.ScoringConfig`.

    Returns:
        ``(profile, normalized_service_years, normalized_trip_volume)``
        triples in the input order.
    """
    volume_domain = trip_volume_domain(profiles, config)

    normalized = []
    for profile in profiles:
        service_years = normalize(
            profile.years_of_service, config.service_years_domain
        )
        trip_volume = normalize(profile.confirmed_bookings, volume_domain)
        normalized.append((profile, service_years, trip_volume))

    logger.debug(
        "Normalized %d profiles (tenure domain=%s, volume domain=%s)",
        len(normalized),
        config.service_years_domain.as_list(),
        volume_domain.as_list(),
    )
    return normalized
