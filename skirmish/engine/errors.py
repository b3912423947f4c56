class SkirmishError(Exception):
    """Base class for all simulator errors."""

class MalformedMap(SkirmishError, ValueError):
    """The input grid is ragged, has unknown symbols, or lacks a faction."""

class UnknownUnit(SkirmishError, KeyError):
    """A unit id is not (or no longer) present in the registry."""

class InvariantViolation(SkirmishError, RuntimeError):
    """Board/registry consistency was broken. Always an engine defect."""

class Stalemate(SkirmishError, RuntimeError):
    """A full round passed with no action while both factions are alive."""

class SearchExhausted(SkirmishError, RuntimeError):
    """No attack power up to the search bound gives a clean win."""
