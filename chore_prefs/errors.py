"""Exceptions raised by the preference core."""


class ChorePrefsError(Exception):
    """Base class for chore preference errors."""

    pass


class RemoteLookupError(ChorePrefsError):
    """Raised when a read against the store fails.

    A missing roommate is not an error; resolvers return None for that.
    """

    pass


class RemoteWriteError(ChorePrefsError):
    """Raised when creating a roommate or saving preferences fails."""

    pass


class InvalidScoreError(ChorePrefsError, ValueError):
    """Raised when a preference score is not an integer from 1 to 5."""

    pass


class InvalidNameError(ChorePrefsError, ValueError):
    """Raised when a roommate name is blank."""

    pass


class UnknownChoreError(ChorePrefsError, KeyError):
    """Raised when a score refers to a chore outside the catalog."""

    pass


class SessionStateError(ChorePrefsError):
    """Raised when a form operation is not allowed in the current state."""

    pass
