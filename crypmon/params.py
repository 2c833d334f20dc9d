"""
System Parameters
=================

The public parameters shared read-only by every component of the monitoring
scheme:

- env: the GroupEnvironment (pairing group, RNG, hashing)
- g1 ∈ G1, g2 ∈ G2: fixed public generators
- p: the common prime order
- gT = e(g1, g2) ∈ GT: the derived target-group generator

The generators are obtained by hashing fixed domain tags onto the curve, so
two processes using the same curve derive identical parameters and nobody
knows a discrete-log relation between them.
"""

from dataclasses import dataclass

from charm.toolbox.pairinggroup import G1, G2, GT

from .groups import GroupEnvironment

GENERATOR_G1_TAG = b"CRYPMON-GENERATOR-G1"
GENERATOR_G2_TAG = b"CRYPMON-GENERATOR-G2"


@dataclass(frozen=True)
class SystemParameters:
    """
    Immutable public parameters of one deployment.

    Attributes
    ----------
    env : GroupEnvironment
        The pairing environment
    g1 : G1
        Generator of G1
    g2 : G2
        Generator of G2
    p : int
        Order of G1, G2 and GT
    gT : GT
        e(g1, g2)
    """
    env: GroupEnvironment
    g1: G1
    g2: G2
    p: int
    gT: GT

    @classmethod
    def from_environment(cls, env: GroupEnvironment) -> 'SystemParameters':
        g1 = env.hash_to(GENERATOR_G1_TAG, G1)
        g2 = env.hash_to(GENERATOR_G2_TAG, G2)
        return cls(env=env, g1=g1, g2=g2, p=env.order(), gT=env.pair(g1, g2))

    def max_bitwidth(self) -> int:
        """Largest b such that every value in [0, 2^b) maps injectively into Z_p."""
        return (self.p).bit_length() - 1


# Layout of the hidden vectors (dimension 5):
#   ciphertext  w = (α_i, 1, x,    r, 0)
#   value slot  k = (τ,  -γ·y, γ,  0, s)
#   wildcard    k = (τ,   0,   0,  0, s)
# so that <w, k> = τ·α_i + γ·(x - y), or τ·α_i for a wildcard.
VECTOR_DIMENSION = 5
