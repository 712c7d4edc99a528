"""Exceptions raised by the solver and its text/JSON boundary."""


class MalformedInput(ValueError):
    """Tile, meld or request text outside its grammar or numeric range."""


class InvariantViolation(RuntimeError):
    """A state that construction should rule out, e.g. a stale table index."""
