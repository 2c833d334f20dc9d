"""
Utility Functions
=================

This module provides the linear-algebra and group helpers used by the
monitoring scheme.

Key Operations:
- Dual bases over Z_p: a random basis B and its dual B*
- Vector exponentiation: X^{v} = (X^{v_0}, ..., X^{v_{d-1}}) in G1 or G2
- Pairing products: ∏ e(a_j, b_j)

Matrices and vectors hold charm ``ZR`` elements; the arithmetic itself is
charm's ``matrixops``.

Dual bases:
-----------
For an invertible d×d matrix B over Z_p, the dual basis is
B* = (B^{-1})^T, i.e. B · B*^T = I. For any vectors v, k:

    <v·B, k·B*> = v · B · B*^T · k^T = <v, k>

so pairing a vector hidden under B with one hidden under B* reveals only
their inner product, in the exponent.
"""

from typing import List, Sequence, Tuple

from charm.toolbox.matrixops import GaussEliminationinGroups, MatrixMulGroups, MatrixTransGroups
from charm.toolbox.pairinggroup import GT

Matrix = List[list]


def identity_matrix(d: int, env) -> Matrix:
    """The d×d identity over Z_p."""
    return [[env.scalar(1 if i == j else 0) for j in range(d)] for i in range(d)]


def random_basis(d: int, env) -> Matrix:
    """A d×d matrix of uniform Z_p entries."""
    return [[env.random_scalar() for _ in range(d)] for _ in range(d)]


def dual_basis(basis: Matrix, env) -> Matrix:
    """
    Compute B* = (B^{-1})^T.

    Row j of B* is the solution x of B·x = e_j, found by Gaussian
    elimination over Z_p.
    """
    d = len(basis)
    one, zero = env.scalar(1), env.scalar(0)
    dual = []
    for j in range(d):
        augmented = [list(row) + [one if i == j else zero] for i, row in enumerate(basis)]
        dual.append(GaussEliminationinGroups(augmented))
    return dual


def is_dual(basis: Matrix, dual: Matrix, env) -> bool:
    """Check B · B*^T = I."""
    product = MatrixMulGroups([list(row) for row in basis], MatrixTransGroups(dual))
    return product == identity_matrix(len(basis), env)


def random_dual_bases(d: int, env) -> Tuple[Matrix, Matrix]:
    """
    Draw a random invertible basis B together with its dual B*.

    Returns
    -------
    (B, B*)
        With B · B*^T = I. A random matrix is singular (or hits a zero
        pivot) with probability about d/p; the pair is then redrawn.
    """
    while True:
        basis = random_basis(d, env)
        dual = dual_basis(basis, env)
        if is_dual(basis, dual, env):
            return basis, dual


def vec_mat_mul(v: Sequence, m: Matrix) -> list:
    """
    Compute the row vector v·M over Z_p.

    Raises
    ------
    ValueError
        If the dimensions do not agree.
    """
    if len(v) != len(m):
        raise ValueError(f"vector length {len(v)} != matrix rows {len(m)}")
    return MatrixMulGroups([list(v)], [list(row) for row in m])[0]


def vector_power(base, exponents: Sequence) -> list:
    """
    Compute (base^{e_0}, ..., base^{e_{d-1}}).

    Parameters
    ----------
    base : G1 or G2
        The common base
    exponents : Sequence[ZR]
        Exponents in Z_p
    """
    return [base ** e for e in exponents]


def pair_prod(g1_elems: list, g2_elems: list, env) -> GT:
    """
    Compute product of pairings: ∏ e(g1_elems[i], g2_elems[i]).

    Notes
    -----
    - If lists are empty, returns the identity element 1_GT
    - g1_elems and g2_elems must have the same length
    """
    if len(g1_elems) != len(g2_elems):
        raise ValueError(f"g1_elems and g2_elems must have same length: {len(g1_elems)} != {len(g2_elems)}")

    result = env.identity(GT)
    for a, b in zip(g1_elems, g2_elems):
        result *= env.pair(a, b)
    return result
