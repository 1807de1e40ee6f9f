"""Exception types raised by the agent-ranker scoring engine."""


class AgentRankerError(Exception):
    """Base class for all agent-ranker errors."""


class ValidationError(AgentRankerError, ValueError):
    """A customer profile field is missing or outside its closed set."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field


class ConfigurationError(AgentRankerError, ValueError):
    """The scoring configuration cannot be used (weights, domains, files)."""


class DataIntegrityError(AgentRankerError):
    """A metric store record is inconsistent with the rest of the snapshot."""
