"""Scoring configuration for the agent-ranker project.

A :class:`ScoringConfig` is an explicit, immutable value passed into the
engine: the weighted dimensions, the baseline used for missing
conditional ratings, and the normalization domains.  Every check runs at
construction time so a bad configuration is rejected before any agent is
scored.

Two named presets ship with the package:

    refined   -- current regime; tenure carries no weight
    original  -- pre-refinement regime with a tenure dimension
"""

from __future__ import annotations

import json
import logging
import pathlib
from dataclasses import dataclass

from agent_ranker.errors import ConfigurationError
from agent_ranker.models import RATING_MAX, RATING_MIN
from agent_ranker.scoring.normalizer import NormalizationDomain

logger = logging.getLogger(__name__)

# Signals a dimension can draw its value from.
SIGNALS: tuple[str, ...] = (
    "rating",
    "lead_source_rating",
    "destination_rating",
    "communication_rating",
    "service_years",
    "trip_volume",
)

# Signals that may be absent for an agent and fall back to the baseline.
CONDITIONAL_SIGNALS: frozenset[str] = frozenset(
    {"lead_source_rating", "destination_rating", "communication_rating"}
)

TRIP_VOLUME_MODES: tuple[str, ...] = ("observed", "static")

WEIGHT_TOLERANCE = 1e-9

DEFAULT_BASELINE_RATING = 3.0
DEFAULT_SERVICE_YEARS_DOMAIN = NormalizationDomain(2.0, 18.0)
DEFAULT_TRIP_VOLUME_DOMAIN = NormalizationDomain(0.0, 50.0)


@dataclass(frozen=True)
class Dimension:
    """One weighted entry of the base score.

    ``signal`` defaults to ``name``.
    """

    name: str
    weight: float
    signal: str | None = None

    def __post_init__(self) -> None:
        if self.signal is None:
            object.__setattr__(self, "signal", self.name)


@dataclass(frozen=True)
class ScoringConfig:
    name: str
    dimensions: tuple[Dimension, ...]
    baseline_rating: float = DEFAULT_BASELINE_RATING
    service_years_domain: NormalizationDomain = DEFAULT_SERVICE_YEARS_DOMAIN
    trip_volume_mode: str = "observed"
    trip_volume_domain: NormalizationDomain = DEFAULT_TRIP_VOLUME_DOMAIN

    def __post_init__(self) -> None:
        object.__setattr__(self, "dimensions", tuple(self.dimensions))
        validate_dimensions(self.dimensions)

        if not RATING_MIN <= self.baseline_rating <= RATING_MAX:
            raise ConfigurationError(
                f"baseline_rating {self.baseline_rating} is outside "
                f"[{RATING_MIN}, {RATING_MAX}]"
            )
        if self.trip_volume_mode not in TRIP_VOLUME_MODES:
            raise ConfigurationError(
                f"trip_volume_mode must be one of {TRIP_VOLUME_MODES}, "
                f"got {self.trip_volume_mode!r}"
            )

    @classmethod
    def from_dict(cls, data: dict, name: str | None = None) -> ScoringConfig:
        """Build a config from a JSON-style mapping.

        Dimensions are given either as ``"weights": {name: weight}`` (each
        name is also its signal) or as ``"dimensions": [{"name", "weight",
        "signal"}]``.  Every other key is optional.

        Raises:
            ConfigurationError: If the mapping is malformed or fails any
                validation rule.
        """
        if "dimensions" in data:
            try:
                dimensions = tuple(
                    Dimension(
                        name=entry["name"],
                        weight=float(entry["weight"]),
                        signal=entry.get("signal"),
                    )
                    for entry in data["dimensions"]
                )
            except (KeyError, TypeError, ValueError) as exc:
                raise ConfigurationError(f"invalid dimensions: {exc}") from exc
        elif "weights" in data:
            try:
                dimensions = tuple(
                    Dimension(key, float(value))
                    for key, value in data["weights"].items()
                )
            except (AttributeError, TypeError, ValueError) as exc:
                raise ConfigurationError(f"invalid weights: {exc}") from exc
        else:
            raise ConfigurationError(
                "configuration needs either 'weights' or 'dimensions'"
            )

        kwargs = {}
        if "baseline_rating" in data:
            try:
                kwargs["baseline_rating"] = float(data["baseline_rating"])
            except (TypeError, ValueError) as exc:
                raise ConfigurationError(
                    f"invalid baseline_rating: {exc}"
                ) from exc
        if "service_years_domain" in data:
            kwargs["service_years_domain"] = NormalizationDomain.from_value(
                data["service_years_domain"]
            )
        if "trip_volume_domain" in data:
            kwargs["trip_volume_domain"] = NormalizationDomain.from_value(
                data["trip_volume_domain"]
            )
        if "trip_volume_mode" in data:
            kwargs["trip_volume_mode"] = data["trip_volume_mode"]

        return cls(
            name=name or data.get("name", "custom"),
            dimensions=dimensions,
            **kwargs,
        )

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "dimensions": [
                {"name": d.name, "weight": d.weight, "signal": d.signal}
                for d in self.dimensions
            ],
            "baseline_rating": self.baseline_rating,
            "service_years_domain": self.service_years_domain.as_list(),
            "trip_volume_mode": self.trip_volume_mode,
            "trip_volume_domain": self.trip_volume_domain.as_list(),
        }


def validate_dimensions(dimensions: tuple[Dimension, ...]) -> None:
    """Reject a dimension set that cannot produce a meaningful base score.

    Rules:
        - at least one dimension
        - every weight is non-negative
        - weights sum to 1.0 within ``WEIGHT_TOLERANCE``
        - dimension names are unique
        - every signal is known and used by exactly one dimension

    Raises:
        ConfigurationError: Describing the first rule broken.
    """
    if not dimensions:
        raise ConfigurationError("at least one weighted dimension is required")

    names: set[str] = set()
    signals: dict[str, str] = {}
    for dim in dimensions:
        if dim.weight < 0:
            raise ConfigurationError(
                f"dimension {dim.name!r} has negative weight {dim.weight}"
            )
        if dim.name in names:
            raise ConfigurationError(f"dimension {dim.name!r} is listed twice")
        names.add(dim.name)

        if dim.signal not in SIGNALS:
            raise ConfigurationError(
                f"dimension {dim.name!r} uses unknown signal {dim.signal!r}; "
                f"expected one of {', '.join(SIGNALS)}"
            )
        if dim.signal in signals:
            raise ConfigurationError(
                f"signal {dim.signal!r} is weighted by both "
                f"{signals[dim.signal]!r} and {dim.name!r}"
            )
        signals[dim.signal] = dim.name

    total = sum(dim.weight for dim in dimensions)
    if abs(total - 1.0) > WEIGHT_TOLERANCE:
        raise ConfigurationError(
            f"dimension weights must sum to 1.0, got {total:.12f}"
        )


# ---------------------------------------------------------------------------
# Presets
# ---------------------------------------------------------------------------

REFINED_CONFIG = ScoringConfig(
    name="refined",
    dimensions=(
        Dimension("rating", 0.30),
        Dimension("lead_source_rating", 0.20),
        Dimension("destination_rating", 0.20),
        Dimension("communication_rating", 0.10),
        Dimension("trip_volume", 0.20),
    ),
)

ORIGINAL_CONFIG = ScoringConfig(
    name="original",
    dimensions=(
        Dimension("rating", 0.25),
        Dimension("lead_source_rating", 0.20),
        Dimension("destination_rating", 0.20),
        Dimension("service_years", 0.15),
        Dimension("trip_volume", 0.20),
    ),
)

PRESETS: dict[str, ScoringConfig] = {
    REFINED_CONFIG.name: REFINED_CONFIG,
    ORIGINAL_CONFIG.name: ORIGINAL_CONFIG,
}

DEFAULT_CONFIG = REFINED_CONFIG


def get_preset(name: str) -> ScoringConfig:
    try:
        return PRESETS[name]
    except KeyError:
        raise ConfigurationError(
            f"unknown preset {name!r}; expected one of {', '.join(PRESETS)}"
        ) from None


def load_config(path: str | pathlib.Path) -> ScoringConfig:
    """Read a :class:`ScoringConfig` from a JSON file.

    The config name defaults to the file stem.

    Raises:
        ConfigurationError: If the file cannot be read, is not valid JSON,
            or fails validation.
    """
    path = pathlib.Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"cannot load config {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"config {path} must contain a JSON object")

    config = ScoringConfig.from_dict(data, name=data.get("name", path.stem))
    logger.info(
        "Loaded scoring config %r from %s (%d dimensions)",
        config.name, path, len(config.dimensions),
    )
    return config
