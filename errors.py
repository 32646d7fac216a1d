"""Exceptions raised by the lineup optimizer.

Missing data for a single player is never an exception: that player is simply
left out of the projection map. These types cover the failures that make a
whole optimize / waiver call meaningless.
"""


class OptimizerError(Exception):
    """Base class for optimizer failures surfaced to callers."""

    message = "Lineup optimization failed"

    def __init__(self, detail: str = ""):
        self.detail = detail
        super().__init__(f"{self.message}: {detail}" if detail else self.message)


class NoTeamData(OptimizerError):
    """Raised when the roster is missing or empty."""

    message = "No team data available"


class NoProjections(OptimizerError):
    """Raised when there are no projections at all for the requested week.

    Producing an all-bench lineup from an empty projection table would look
    like a valid answer, so callers get this instead.
    """

    message = "No projections available"


class InvalidLineupRequirements(OptimizerError):
    """Raised when an explicit requirement map cannot describe a lineup.

    Derived requirements never raise this; they fall back to the default
    lineup instead.
    """

    message = "Invalid lineup requirements"
