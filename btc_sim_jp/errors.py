"""Engine error types."""


class EngineError(ValueError):
    """Run-level failure of the projection engine."""


class InvalidYearError(EngineError):
    """Year outside the domain of the price model."""
