"""Engine exceptions."""


class EngineError(Exception):
    """Base class for engine failures."""


class InvalidInputError(EngineError, ValueError):
    """Caller supplied a value the engine cannot safely clamp.

    Examples: negative durations, negative ability haste, non-positive turn counts.
    """


class InvariantViolationError(EngineError, RuntimeError):
    """A ledger entry was found in an impossible state (e.g. negative remaining turns).

    Only raised in strict mode; production resolution logs and clamps to zero.
    """


class EncounterOverError(EngineError):
    """An action was requested from an encounter that has already ended."""


class CrowdControlledError(EngineError):
    """An actor tried to do something an active crowd control prevents."""
