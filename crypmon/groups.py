"""
Group Environment
=================

This module wraps a charm-crypto ``PairingGroup`` into the primitive provider
used by every other component of the monitoring scheme:

- Two source groups G1, G2 and a target group GT of prime order p
- The bilinear map e: G1 × G2 → GT (implemented as ``pair``)
- Uniform sampling of scalars in Z_p and of group elements
- Hashing of byte strings onto G1, G2 or Z_p
- Serialization of group elements

The scheme is written against this capability set only, so any Type-3
pairing curve supported by charm-crypto can back it. When the configured
curve cannot be loaded, BN254 and then SS512 are tried (unless ``strict``).
"""

import logging
import random

from charm.toolbox.pairinggroup import PairingGroup, ZR, G1, G2, GT, pair

from .config import config

logger = logging.getLogger(__name__)

# Curves tried, in order, when the requested one cannot be initialised
FALLBACK_CURVES = ('BN254', 'SS512')


class GroupEnvironment:
    """
    Bilinear pairing environment backed by charm-crypto.

    Parameters
    ----------
    group_name : str, optional
        The pairing curve identifier. Defaults to ``config.pairing_curve``.
    seed : int, optional
        Seed for a deterministic random source. If None, charm's own RNG is
        used for every draw.
    param_file : str, optional
        Path to a PBC curve parameter file. Takes precedence over
        ``group_name`` and disables the curve fallback.
    strict : bool, optional
        If True, never fall back to another curve.

    Notes
    -----
    The seeded source is a private ``random.Random`` instance. It is only
    meant for reproducible tests and experiments: it is not a
    cryptographically secure generator.
    """

    def __init__(self, group_name=None, seed=None, param_file=None, strict=False):
        if param_file is not None:
            self.group = PairingGroup(param_file, param_file=True)
            self.group_name = param_file
        else:
            self.group, self.group_name = _init_group(group_name or config.pairing_curve, strict)

        self.seed = seed
        self._rng = random.Random(seed) if seed is not None else None
        self._order = int(self.group.order())

    def order(self) -> int:
        """Return the prime order p shared by G1, G2 and GT."""
        return self._order

    # ------------------------------------------------------------------
    # Scalars
    # ------------------------------------------------------------------

    def scalar(self, value: int) -> ZR:
        """Embed an integer into Z_p."""
        return self.group.init(ZR, value % self._order)

    def random_int(self) -> int:
        """Draw a uniform integer in [0, p)."""
        if self._rng is not None:
            return self._rng.randrange(self._order)
        return int(self.group.random(ZR)) % self._order

    def random_nonzero_int(self) -> int:
        """Draw a uniform integer in [1, p)."""
        x = self.random_int()
        while x == 0:
            x = self.random_int()
        return x

    def random_scalar(self) -> ZR:
        """Draw a uniform scalar in Z_p."""
        return self.scalar(self.random_int())

    # ------------------------------------------------------------------
    # Group elements
    # ------------------------------------------------------------------

    def identity(self, group_type):
        """Return the identity element of G1, G2 or GT."""
        return self.group.init(group_type, 1)

    def random_element(self, group_type, base=None):
        """
        Draw a uniform element of G1 or G2.

        With a seeded source the element is ``base ** r`` for a seeded
        scalar r, so ``base`` (a generator of the requested group) is then
        required.
        """
        if self._rng is None:
            return self.group.random(group_type)
        if base is None:
            raise ValueError("A seeded environment needs a generator to sample group elements")
        return base ** self.random_scalar()

    def hash_to(self, data: bytes, group_type):
        """Hash a byte string onto G1, G2 or Z_p."""
        return self.group.hash(data, group_type)

    def pair(self, a: G1, b: G2) -> GT:
        """Compute the bilinear map e(a, b)."""
        return pair(a, b)

    def serialize(self, elem) -> bytes:
        """Serialize a group element to bytes."""
        return self.group.serialize(elem)

    def deserialize(self, data: bytes):
        """Deserialize a group element from bytes."""
        return self.group.deserialize(data)

    def __repr__(self):
        return f"GroupEnvironment({self.group_name!r}, seeded={self._rng is not None})"


def _init_group(group_name: str, strict: bool):
    """Initialise a PairingGroup, falling back to other curves unless strict."""
    try:
        return PairingGroup(group_name), group_name
    except Exception as e:
        if strict:
            raise
        logger.warning("%s not available (%s), trying fallback curves", group_name, e)

    last_error = None
    for fallback in FALLBACK_CURVES:
        if fallback == group_name:
            continue
        try:
            group = PairingGroup(fallback)
        except Exception as e:
            logger.warning("%s not available (%s)", fallback, e)
            last_error = e
            continue
        logger.warning("Falling back to %s", fallback)
        return group, fallback
    raise last_error


__all__ = ['GroupEnvironment', 'ZR', 'G1', 'G2', 'GT']
