"""
Cryptographic Monitoring System Primitives
==========================================

Building blocks of a privacy-preserving multi-agent monitoring scheme:
agents encrypt observations under a shared session identifier, a rule
authority compiles conjunctive equality rules (with per-slot wildcards) into
tokens, and an alarm system learns only whether a set of ciphertexts
satisfies a token.

This package implements the primitives using charm-crypto with Type-3
asymmetric pairing curves. The roles themselves live in the top-level
``cms_authority``, ``cms_agent``, ``cms_rules`` and ``cms_alarm`` modules.

Modules:
--------
- groups: Pairing environment (charm-crypto adapter, injectable RNG)
- params: Immutable system parameters (g1, g2, p, gT)
- utils: Dual bases over Z_p (charm matrixops), vector exponentiation, pairing products
- oracles: Domain-separated hash oracles
- errors: Error taxonomy
- config: Environment-driven configuration

Usage:
------
    from crypmon import GroupEnvironment
    from cms_authority import setup, Authority
    from cms_rules import WILDCARD
    from cms_alarm import new_alarm_system

    params = setup(GroupEnvironment('MNT224'))
    rule_generator, agents = Authority(params).generate_keys(3, 8)
    token = rule_generator.new_token([16, WILDCARD, 12])
    cts = [a.encrypt("identifier", v) for a, v in zip(agents, [16, 42, 12])]
    assert new_alarm_system(params, token, "identifier").test(cts)
"""

__version__ = "0.1.0"

from .groups import GroupEnvironment
from .params import SystemParameters
from .errors import (
    CrypmonError, InvalidParameters, ValueOutOfRange, InvalidRule, MalformedInput
)

__all__ = [
    'GroupEnvironment', 'SystemParameters',
    'CrypmonError', 'InvalidParameters', 'ValueOutOfRange', 'InvalidRule', 'MalformedInput',
]
