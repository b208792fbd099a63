"""Failures that leave the simulation unable to proceed."""


class ConfigurationError(ValueError):
    """A level table, era table or session option is unusable."""


class EraCoverageError(ConfigurationError):
    """A simulated day falls outside every era in the table."""

    def __init__(self, day: int, message: str = "") -> None:
        self.day = day
        super().__init__(message or f"no era covers day {day}")
