"""
Agent Implementation
====================

An Agent is an independent observation source (sensor, event log, ...) that:
1. Holds its own secret basis B_i and key-set share α_i
2. Encrypts (identifier, value) pairs locally, without coordinating with
   the other agents

Encryption:
-----------
For a session identifier ID and an observed value x ∈ [0, 2^b):

    h := H(ID) ∈ G1
    w := (α_i, 1, x, r, 0)        with fresh r ∈ Z_p
    C := h^{w·B_i} ∈ G1^5

Security Notes:
---------------
- Fresh r per call: two encryptions of the same (ID, x) are unlinkable
  as bit strings
- The identifier is the base of every element, so a ciphertext produced
  under one identifier never satisfies a token evaluated under another
"""

import logging
from dataclasses import dataclass

from crypmon.errors import MalformedInput, ValueOutOfRange
from crypmon.oracles import H_id
from crypmon.params import SystemParameters
from crypmon.utils import Matrix, vec_mat_mul, vector_power

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Ciphertext:
    """
    Encrypted observation of one agent.

    Attributes
    ----------
    agent_index : int
        Index of the producing agent in its key set
    identifier : str
        Session identifier the value was encrypted under (informational;
        the cryptographic binding is carried by ``elements``)
    elements : Tuple[G1, ...]
        The blinded payload h^{w·B_i}
    """
    agent_index: int
    identifier: str
    elements: tuple

    def to_bytes(self, env) -> bytes:
        """Serialize the payload (for size measurements and comparisons)."""
        return b"".join(env.serialize(e) for e in self.elements)


class Agent:
    """
    Agent key: encrypts observations for one slot of the rule vector.

    Agents are immutable after construction and may be shared between
    threads; every encryption only draws fresh randomness.
    """

    def __init__(self, params: SystemParameters, index: int, bitwidth: int,
                 basis: Matrix, share: int):
        """
        Initialize the Agent.

        Parameters
        ----------
        params : SystemParameters
            Public parameters
        index : int
            Position of this agent in the key set (0-based)
        bitwidth : int
            Values must lie in [0, 2^bitwidth)
        basis : Matrix
            Secret 5×5 invertible basis B_i, entries in ZR
        share : int
            Secret key-set share α_i

        Notes
        -----
        Agents are created by ``Authority.generate_keys``; do not build
        them by hand.
        """
        self._params = params
        self._index = index
        self._bitwidth = bitwidth
        self._basis = tuple(tuple(row) for row in basis)
        self._share = share

    @property
    def index(self) -> int:
        return self._index

    @property
    def bitwidth(self) -> int:
        return self._bitwidth

    def encrypt(self, identifier: str, value: int) -> Ciphertext:
        """
        Encrypt an observed value under a session identifier.

        Parameters
        ----------
        identifier : str
            The session identifier
        value : int
            The observation, in [0, 2^bitwidth)

        Returns
        -------
        Ciphertext
            A fresh, randomized ciphertext tagged with this agent's index

        Raises
        ------
        ValueOutOfRange
            If value is not an integer in [0, 2^bitwidth)
        MalformedInput
            If identifier is not a str
        """
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueOutOfRange(f"Value must be an integer, got {type(value).__name__}")
        if not 0 <= value < (1 << self._bitwidth):
            raise ValueOutOfRange(
                f"Value {value} outside message space [0, 2^{self._bitwidth}) of agent {self._index}")

        if not isinstance(identifier, str):
            raise MalformedInput(f"Identifier must be a str, got {type(identifier).__name__}")

        env = self._params.env

        h = H_id(identifier, env)
        w = [env.scalar(self._share), env.scalar(1), env.scalar(value), env.random_scalar(), env.scalar(0)]
        exponents = vec_mat_mul(w, self._basis)

        elements = tuple(vector_power(h, exponents))
        logger.debug("agent %d encrypted an observation", self._index)
        return Ciphertext(agent_index=self._index, identifier=identifier, elements=elements)

    def __repr__(self):
        return f"Agent(index={self._index}, bitwidth={self._bitwidth})"
