"""Exception types raised by ripsct.

Lookups that miss (unknown ids, coordinates outside the box) are not errors
and return ``None``, ``False`` or an empty list instead.
"""


class InvalidConfiguration(ValueError):
    """A construction or entry parameter is invalid (empty box, negative
    dimension limit, unknown backend, ...)."""


class PreconditionViolation(ValueError):
    """Input handed over by the caller violates a structural requirement,
    e.g. an empty vertex list or mismatched coordinate dimensions."""
