"""Error and warning types raised while building rupture forecasts."""


class ConsistencyError(RuntimeError):
    """Fatal inconsistency in derived fault-system data.

    Raised when parallel rupture attribute arrays disagree in length, or
    when interpolated slip rates do not line up with the sections they
    describe. Output for the whole fault system should be discarded.
    """

    pass


class DomainError(ValueError):
    """Input outside the range a model is defined for."""

    pass


class PolicyWarning(UserWarning):
    """Warning for inputs dropped or skipped under a defined fallback."""

    pass
