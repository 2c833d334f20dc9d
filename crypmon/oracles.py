"""
Hash Oracles
============

Random oracles used by the monitoring scheme.

- H_id: map a session identifier onto G1; every ciphertext and the alarm
  reference of one session share this base
- H_keyset: derive the secret of one key set from the Authority's master
  secret

Domain Separation:
------------------
Each oracle uses a different prefix:
- H_id uses prefix b"CMS-ID"
- H_keyset uses prefix b"CMS-KEYSET"

Inputs are length-prefixed before hashing, so distinct argument tuples never
serialize to the same byte string.
"""

from charm.toolbox.pairinggroup import ZR, G1


def _encode(*args) -> bytes:
    """
    Serialize oracle arguments unambiguously.

    Every field is written as a 4-byte big-endian length followed by its
    bytes. Integers are encoded big-endian (non-negative only); strings as
    UTF-8.
    """
    result = b""
    for arg in args:
        if isinstance(arg, bytes):
            data = arg
        elif isinstance(arg, str):
            data = arg.encode('utf-8')
        elif isinstance(arg, int):
            if arg < 0:
                raise ValueError(f"cannot encode negative integer {arg}")
            data = arg.to_bytes(max(1, (arg.bit_length() + 7) // 8), 'big')
        else:
            raise TypeError(f"cannot encode {type(arg).__name__} for hashing")
        result += len(data).to_bytes(4, 'big') + data
    return result


def H_id(identifier: str, env) -> G1:
    """
    Hash a session identifier onto G1.

    Parameters
    ----------
    identifier : str
        The session identifier
    env : GroupEnvironment
        The pairing environment

    Returns
    -------
    G1
        h = H(identifier), the base of every ciphertext element of the session
    """
    if not isinstance(identifier, str):
        raise TypeError(f"identifier must be a str, got {type(identifier).__name__}")
    return env.hash_to(_encode(b"CMS-ID", identifier), G1)


def H_keyset(master_secret: int, n: int, bitwidth: int, nonce: int, env) -> int:
    """
    Derive a key-set secret κ ∈ Z_p from the master secret.

    The nonce is drawn fresh by every key generation, so two key sets for
    the same (n, bitwidth) are independent.
    """
    kappa = env.hash_to(_encode(b"CMS-KEYSET", master_secret, n, bitwidth, nonce), ZR)
    return int(kappa) % env.order()
