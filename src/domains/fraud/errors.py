"""Error taxonomy for the charge scoring core."""


class FraudEngineError(Exception):
    """Base class for scoring core errors."""


class ConfigurationError(FraudEngineError):
    """Rule or policy configuration is malformed. Raised at startup, never per request."""


class EvaluationError(FraudEngineError):
    """A rule condition could not be evaluated against a charge."""

    def __init__(self, rule_id: str | None, message: str) -> None:
        super().__init__(message)
        self.rule_id = rule_id


class ExternalServiceError(FraudEngineError):
    """The explanation service timed out, errored, or returned garbage."""
