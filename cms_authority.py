"""
Authority Implementation
========================

The Authority is the trusted party that:
1. Sets up the public system parameters
2. Holds a master secret, drawn once at construction
3. Generates linked key sets: one RuleGenerator and n Agent keys per call

Key-Set Derivation:
-------------------
For a call generate_keys(n, b):

    κ      := H_keyset(msk, n, b, nonce)       with a fresh nonce
    α_i    random for i < n-1, α_{n-1} := κ - Σ_{i<n-1} α_i
    B_i    random invertible 5×5 matrix over Z_p
    B*_i   := (B_i^{-1})^T

Agent i receives (B_i, α_i); the RuleGenerator receives (B*_0..B*_{n-1}, κ).
Together the α_i and κ form an additive sharing across n+1 parties
(Σ α_i - κ = 0), which is what makes the aggregate Test collapse to the
public reference exactly when all value slots match.

Security Model:
---------------
- The master secret never leaves the Authority; κ is a one-way image of it
- No subset of agent keys determines κ without all n shares
- Two calls yield independent key sets: tokens from one never test
  positively against ciphertexts from the other
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from crypmon.errors import InvalidParameters
from crypmon.groups import GroupEnvironment
from crypmon.oracles import H_keyset
from crypmon.params import SystemParameters, VECTOR_DIMENSION
from crypmon.utils import Matrix, random_dual_bases
from cms_agent import Agent
from cms_rules import RuleGenerator

logger = logging.getLogger(__name__)


def setup(env: Optional[GroupEnvironment] = None) -> SystemParameters:
    """
    Create the public system parameters.

    Parameters
    ----------
    env : GroupEnvironment, optional
        The pairing environment. If None, one is built from the configured
        curve.

    Returns
    -------
    SystemParameters
        Immutable parameters shared by every component
    """
    if env is None:
        env = GroupEnvironment()
    params = SystemParameters.from_environment(env)
    logger.debug("system parameters set up over %s", env.group_name)
    return params


@dataclass(frozen=True)
class KeySetSecrets:
    """
    Secrets of one key set, produced once by ``Authority.generate_keys``.

    Each field is handed to exactly one derived component; the value object
    itself is not retained.
    """
    kappa: int
    shares: Tuple[int, ...]
    bases: Tuple[Matrix, ...]
    dual_bases: Tuple[Matrix, ...]


class Authority:
    """
    Rule authority / key generation center.
    """

    def __init__(self, params: SystemParameters):
        """
        Initialize the Authority and draw its master secret.

        Parameters
        ----------
        params : SystemParameters
            Public parameters from ``setup``
        """
        self.params = params
        self._master_secret = params.env.random_nonzero_int()

    def _validate(self, n, bitwidth):
        for name, value in (("number of agents", n), ("bitwidth", bitwidth)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidParameters(f"The {name} must be an integer, got {value!r}")
            if value <= 0:
                raise InvalidParameters(f"The {name} must be positive, got {value}")

        max_bits = self.params.max_bitwidth()
        if bitwidth > max_bits:
            raise InvalidParameters(
                f"Bitwidth {bitwidth} too large for group order; at most {max_bits} bits fit in Z_p")

    def _derive_key_set(self, n: int, bitwidth: int) -> KeySetSecrets:
        env = self.params.env
        p = self.params.p

        nonce = env.random_int()
        kappa = H_keyset(self._master_secret, n, bitwidth, nonce, env)

        shares = [env.random_int() for _ in range(n - 1)]
        shares.append((kappa - sum(shares)) % p)

        bases, duals = zip(*(random_dual_bases(VECTOR_DIMENSION, env) for _ in range(n)))

        return KeySetSecrets(
            kappa=kappa,
            shares=tuple(shares),
            bases=bases,
            dual_bases=duals,
        )

    def generate_keys(self, n: int, bitwidth: int) -> Tuple[RuleGenerator, List[Agent]]:
        """
        Generate a linked key set for n agents.

        Parameters
        ----------
        n : int
            Number of agents (rule length)
        bitwidth : int
            Values encrypted by the agents lie in [0, 2^bitwidth)

        Returns
        -------
        rule_generator : RuleGenerator
            Compiles rules for this key set
        agents : List[Agent]
            agents[i] encrypts for slot i

        Raises
        ------
        InvalidParameters
            If n or bitwidth is not a positive integer, or 2^bitwidth
            exceeds the group order
        """
        self._validate(n, bitwidth)
        key_set = self._derive_key_set(n, bitwidth)

        rule_generator = RuleGenerator(self.params, bitwidth, key_set.dual_bases, key_set.kappa)
        agents = [
            Agent(self.params, i, bitwidth, key_set.bases[i], key_set.shares[i])
            for i in range(n)
        ]

        logger.debug("generated key set for %d agents at %d bits", n, bitwidth)
        return rule_generator, agents
