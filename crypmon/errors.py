"""
Error Taxonomy
==============

Every failure of the monitoring scheme is a caller-input problem. Errors are
raised eagerly by the call that introduces the bad input and never deferred
into a silently wrong Test result.

- InvalidParameters: bad agent count or bit-width at key generation
- ValueOutOfRange: an agent is asked to encrypt a value outside [0, 2^b)
- InvalidRule: rule length mismatch or out-of-range rule entry
- MalformedInput: a ciphertext vector of the wrong shape given to Test

A non-match is NOT an error: Test simply returns False.
"""


class CrypmonError(Exception):
    """Base class for all errors raised by the monitoring scheme."""


class InvalidParameters(CrypmonError, ValueError):
    """Key generation was asked for an impossible agent count or bit-width."""


class ValueOutOfRange(CrypmonError, ValueError):
    """An observed value does not fit in the agent's message space."""


class InvalidRule(CrypmonError, ValueError):
    """A rule vector cannot be compiled into a token."""


class MalformedInput(CrypmonError, ValueError):
    """A ciphertext vector does not have the shape the token expects."""
