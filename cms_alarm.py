"""
Alarm System (Verifier) Implementation
======================================

The Alarm System is bound to one token and one session identifier. Given the
agents' ciphertexts it learns a single bit: whether every non-wildcard slot
of the rule is satisfied.

Test Equation:
--------------
With h = H(ID), ciphertexts C_i = h^{w_i·B_i} and token shares
D_i = g2^{k_i·B*_i}:

    ∏_i ∏_j e(C_i[j], D_i[j]) = e(h, g2)^{Σ_i <w_i, k_i>}
                              = e(h, g2)^{τ·Σ α_i + Σ_{value slots} γ_i·(x_i - y_i)}

and the reference is derived from the identifier and the token anchor:

    R := e(H(ID), A) = e(h, g2)^{τ·κ}

Since Σ α_i = κ, the alarm is raised iff the product equals R, i.e. iff
x_i = y_i for every value slot (except with probability about n/p).

Security Notes:
---------------
- Each slot's term is masked by the unknown τ·α_i, so the verifier cannot
  tell which slot(s) caused a mismatch
- A ciphertext under another identifier, from another key set, or placed at
  another slot breaks the equality
"""

import logging

from crypmon.errors import MalformedInput
from crypmon.oracles import H_id
from crypmon.params import SystemParameters, VECTOR_DIMENSION
from crypmon.utils import pair_prod
from cms_agent import Ciphertext
from cms_rules import RuleToken

logger = logging.getLogger(__name__)


class AlarmSystem:
    """
    Verifier bound to one (params, token, identifier) triple.

    ``test`` is a pure function of its argument: it may be called repeatedly,
    from several threads, with different ciphertext sets.
    """

    def __init__(self, params: SystemParameters, token: RuleToken, identifier: str):
        """
        Initialize the Alarm System.

        Parameters
        ----------
        params : SystemParameters
            Public parameters
        token : RuleToken
            The compiled rule to evaluate
        identifier : str
            The session identifier ciphertexts must have been produced under

        Raises
        ------
        MalformedInput
            If the token is not a well-formed RuleToken, or the identifier
            is not a str
        """
        if not isinstance(token, RuleToken):
            raise MalformedInput(f"Expected a RuleToken, got {type(token).__name__}")
        if not isinstance(identifier, str):
            raise MalformedInput(f"Identifier must be a str, got {type(identifier).__name__}")
        if any(len(share) != VECTOR_DIMENSION for share in token.shares):
            raise MalformedInput(f"Every token share must hold {VECTOR_DIMENSION} elements")

        self._params = params
        self._token = token
        self._identifier = identifier

        # The reference depends only on the identifier and the token anchor
        h = H_id(identifier, params.env)
        self._reference = params.env.pair(h, token.anchor)

    @property
    def identifier(self) -> str:
        return self._identifier

    @property
    def token(self) -> RuleToken:
        return self._token

    def _align(self, ciphertexts) -> list:
        """
        Order the ciphertexts by their agent index.

        Returns
        -------
        list
            ciphertexts[i] is the ciphertext of agent i

        Raises
        ------
        MalformedInput
            If the vector does not hold exactly one well-formed ciphertext for
            every index in {0, ..., n-1}
        """
        n = self._token.rule_length
        try:
            ciphertexts = list(ciphertexts)
        except TypeError:
            raise MalformedInput(f"Ciphertexts must be a sequence, got {type(ciphertexts).__name__}")

        if len(ciphertexts) != n:
            raise MalformedInput(f"Expected {n} ciphertexts, got {len(ciphertexts)}")

        slots = [None] * n
        for pos, ct in enumerate(ciphertexts):
            if not isinstance(ct, Ciphertext):
                raise MalformedInput(f"Entry {pos} is not a Ciphertext: {type(ct).__name__}")
            if len(ct.elements) != VECTOR_DIMENSION:
                raise MalformedInput(
                    f"Ciphertext {pos} holds {len(ct.elements)} elements, expected {VECTOR_DIMENSION}")
            i = ct.agent_index
            if isinstance(i, bool) or not isinstance(i, int) or not 0 <= i < n:
                raise MalformedInput(f"Ciphertext {pos} has agent index {i!r} outside [0, {n})")
            if slots[i] is not None:
                raise MalformedInput(f"Duplicate ciphertext for agent {i}")
            slots[i] = ct

        # n entries, no duplicates, all indices in range: every slot is filled
        return slots

    def test(self, ciphertexts) -> bool:
        """
        Evaluate the token against a set of ciphertexts.

        Parameters
        ----------
        ciphertexts : Sequence[Ciphertext]
            One ciphertext per agent of the key set

        Returns
        -------
        bool
            True iff every non-wildcard slot encrypts the rule's target value
            under this alarm system's identifier

        Raises
        ------
        MalformedInput
            If the ciphertext vector has the wrong shape
        """
        slots = self._align(ciphertexts)

        g1_elems, g2_elems = [], []
        for ct, share in zip(slots, self._token.shares):
            g1_elems.extend(ct.elements)
            g2_elems.extend(share)

        combined = pair_prod(g1_elems, g2_elems, self._params.env)
        alarm = combined == self._reference

        logger.debug("test over %d ciphertexts for %r: alarm=%s", len(slots), self._identifier, alarm)
        return alarm

    def __repr__(self):
        return f"AlarmSystem(identifier={self._identifier!r}, n={self._token.rule_length})"


def new_alarm_system(params: SystemParameters, token: RuleToken, identifier: str) -> AlarmSystem:
    """Create an AlarmSystem bound to (params, token, identifier)."""
    return AlarmSystem(params, token, identifier)
