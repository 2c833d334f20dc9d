"""
Rule Generator Implementation
=============================

The Rule Generator is held by the rule authority and compiles rules into
tokens. A rule is an ordered vector with one entry per agent: either a target
value in [0, 2^b) or WILDCARD ("accept any value at this slot").

Token Derivation:
-----------------
For a rule (y_0, ..., y_{n-1}) draw fresh τ ≠ 0 and, per slot, fresh
γ_i ≠ 0 and s_i:

    value slot     k_i := (τ, -γ_i·y_i, γ_i, 0, s_i)
    wildcard slot  k_i := (τ, 0, 0, 0, s_i)

    D_i := g2^{k_i·B*_i} ∈ G2^5
    A   := g2^{τ·κ}               (anchor)

where B*_i is the dual of agent i's basis and κ = Σ α_i is the key-set
secret. The token is (D_0, ..., D_{n-1}, A).

Notes:
------
- Wildcard and value shares have the same shape; a verifier cannot tell them
  apart
- Two tokens for the same rule are not bit-identical but classify every
  ciphertext set identically
"""

import logging
from dataclasses import dataclass
from typing import List, Sequence

from charm.toolbox.pairinggroup import G2

from crypmon.errors import InvalidRule
from crypmon.params import SystemParameters
from crypmon.utils import Matrix, vec_mat_mul, vector_power

logger = logging.getLogger(__name__)


class _Wildcard:
    """Rule entry accepting any value at its slot."""

    def __repr__(self):
        return 'WILDCARD'

    def __reduce__(self):
        return 'WILDCARD'


WILDCARD = _Wildcard()

# Wildcard encoding accepted in integer-only rule vectors
LEGACY_WILDCARD = -1


@dataclass(frozen=True)
class RuleToken:
    """
    Compiled, reusable representation of a rule.

    Attributes
    ----------
    shares : Tuple[Tuple[G2, ...], ...]
        One share D_i per agent slot
    anchor : G2
        A = g2^{τ·κ}, from which the alarm reference is derived
    """
    shares: tuple
    anchor: G2

    @property
    def rule_length(self) -> int:
        return len(self.shares)

    def to_bytes(self, env) -> bytes:
        """Serialize the token (for size measurements and comparisons)."""
        data = b"".join(env.serialize(e) for share in self.shares for e in share)
        return data + env.serialize(self.anchor)


class RuleGenerator:
    """
    Compiles rules into RuleTokens for one key set.

    The generator is immutable and may mint unboundedly many tokens.
    """

    def __init__(self, params: SystemParameters, bitwidth: int,
                 dual_bases: Sequence[Matrix], kappa: int):
        """
        Initialize the Rule Generator.

        Parameters
        ----------
        params : SystemParameters
            Public parameters
        bitwidth : int
            Non-wildcard entries must lie in [0, 2^bitwidth)
        dual_bases : Sequence[Matrix]
            B*_i for every agent i of the key set
        kappa : int
            Key-set secret κ
        """
        self._params = params
        self._bitwidth = bitwidth
        self._dual_bases = tuple(tuple(tuple(row) for row in b) for b in dual_bases)
        self._kappa = kappa

    @property
    def n(self) -> int:
        """Number of agents (rule length) of the key set."""
        return len(self._dual_bases)

    @property
    def bitwidth(self) -> int:
        return self._bitwidth

    def _normalize(self, rule) -> List:
        """
        Check a rule vector and map legacy wildcards to WILDCARD.

        Raises
        ------
        InvalidRule
            If the rule is not a sequence of length n, or an entry is neither
            a wildcard nor an integer in [0, 2^bitwidth).
        """
        if isinstance(rule, (str, bytes)):
            raise InvalidRule("Rule must be a sequence of entries, not a string")
        try:
            entries = list(rule)
        except TypeError:
            raise InvalidRule(f"Rule must be a sequence, got {type(rule).__name__}")

        if len(entries) != self.n:
            raise InvalidRule(f"Rule length {len(entries)} != number of agents n={self.n}")

        normalized = []
        limit = 1 << self._bitwidth
        for i, y in enumerate(entries):
            if y is WILDCARD:
                normalized.append(WILDCARD)
            elif isinstance(y, bool) or not isinstance(y, int):
                raise InvalidRule(f"Rule entry {i} must be an integer or WILDCARD, got {y!r}")
            elif y == LEGACY_WILDCARD:
                normalized.append(WILDCARD)
            elif not 0 <= y < limit:
                raise InvalidRule(f"Rule entry {i} = {y} outside [0, 2^{self._bitwidth})")
            else:
                normalized.append(y)
        return normalized

    def new_token(self, rule) -> RuleToken:
        """
        Compile a rule into a token.

        Parameters
        ----------
        rule : Sequence
            n entries, each WILDCARD (or -1) or an integer in [0, 2^bitwidth)

        Returns
        -------
        RuleToken
            A freshly randomized token for the rule

        Raises
        ------
        InvalidRule
            On length mismatch or an invalid entry
        """
        entries = self._normalize(rule)

        env = self._params.env
        p = self._params.p
        g2 = self._params.g2

        tau = env.random_nonzero_int()
        shares = []
        for y, dual in zip(entries, self._dual_bases):
            s = env.random_int()
            if y is WILDCARD:
                k = [tau, 0, 0, 0, s]
            else:
                gamma = env.random_nonzero_int()
                k = [tau, (-gamma * y) % p, gamma, 0, s]
            exponents = vec_mat_mul([env.scalar(x) for x in k], dual)
            shares.append(tuple(vector_power(g2, exponents)))

        anchor = g2 ** env.scalar(tau * self._kappa)

        logger.debug("minted token for %d slots", self.n)
        return RuleToken(shares=tuple(shares), anchor=anchor)

    def __repr__(self):
        return f"RuleGenerator(n={self.n}, bitwidth={self._bitwidth})"
