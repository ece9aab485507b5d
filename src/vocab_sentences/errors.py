"""Exception types shared by the acquisition pipeline and the cover selector."""


class InputError(ValueError):
    """Raised before any work starts when the run inputs are unusable."""


class TransientFetchError(Exception):
    """A lookup failed for a reason that may go away on a later run."""


class ConsistencyError(RuntimeError):
    """A must-cover word has no covering sentence."""


class CheckpointError(Exception):
    """A stored checkpoint could not be read back."""
