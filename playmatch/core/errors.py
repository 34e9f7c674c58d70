"""Exceptions raised by the matching core.

Every failure is scoped to the single operation that raised it. The API
layer maps these onto HTTP status codes.
"""


class PlaymatchError(Exception):
    """Base class for all core errors."""


class ValidationError(PlaymatchError):
    """Input rejected before any state was touched."""


class NotFoundError(PlaymatchError):
    """Referenced proposal, event or availability does not exist."""


class InvalidTransitionError(PlaymatchError):
    """Proposal state change attempted from a terminal state."""

    def __init__(self, proposal_id: str, current: str, target: str):
        self.proposal_id = proposal_id
        self.current = current
        self.target = target
        super().__init__(
            f"Proposal {proposal_id} is {current}; cannot transition to {target}"
        )


class ExternalStoreError(PlaymatchError):
    """Event or attendance store could not be reached or refused a write.

    Safe to retry: nothing in the core was changed.
    """
