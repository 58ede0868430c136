"""Numeric kernel backend for exact number-field computations.

The goal of this module is to expose a minimal, deterministic API covering the
subset of computer-algebra services the number-field layer consumes as black
boxes: factorization over Q and over F_p, resultants, discriminants, integer
services, exact linear algebra and floating conjugate approximations.

sympy provides the exact algebra; numpy provides object-array storage for
exact matrices and the floating root finder used for conjugate screens.
Every kernel failure is converted into ``NumericKernelError`` so callers see
one error type, never a sympy internal.

Polynomials cross this boundary as ``nf_poly.Polynomial`` over ``QQ``.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from fractions import Fraction
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as _np
import sympy
from sympy import Poly, Symbol
from sympy.core.sympify import SympifyError
from sympy.polys.domains import QQ as _SQQ
from sympy.polys.polyerrors import BasePolynomialError

from nf_errors import NumberFieldInputError, NumericKernelError, StructuralMismatchError
from nf_poly import QQ, Polynomial

_logger = logging.getLogger(__name__)

_X = Symbol("x")
_T = Symbol("t")


# ---------------------------------------------------------------------------
# Conversions between nf_poly.Polynomial and sympy.Poly
# ---------------------------------------------------------------------------


def _to_fraction(r: Any) -> Fraction:
    r = sympy.sympify(r)
    if not r.is_Rational:
        raise NumericKernelError(f"kernel returned a non-rational value: {r!r}")
    return Fraction(int(r.p), int(r.q))


def to_sympy(f: Polynomial, gen: Symbol = _X) -> Poly:
    if f.field is not QQ:
        raise StructuralMismatchError(f"kernel polynomials must be over QQ, got {f.field!r}")
    rep = [sympy.Rational(c.numerator, c.denominator) for c in reversed(f.coeffs)]
    if not rep:
        return Poly(0, gen, domain=_SQQ)
    return Poly.from_list(rep, gen, domain=_SQQ)


def from_sympy(p: Poly) -> Polynomial:
    if len(p.gens) != 1:
        raise NumericKernelError(f"expected a univariate polynomial, got gens {p.gens}")
    return Polynomial(QQ, [_to_fraction(c) for c in reversed(p.all_coeffs())])


def parse_polynomial(text: str) -> Polynomial:
    """Parse ``"x^3 - 2"`` style input into a polynomial over QQ."""
    if not isinstance(text, str):
        raise NumberFieldInputError(f"polynomial text must be str, got {type(text).__name__}")
    try:
        expr = sympy.sympify(text.replace("^", "**"), locals={"x": _X})
        poly = Poly(expr, _X, domain=_SQQ)
    except (SympifyError, BasePolynomialError, TypeError) as e:
        raise NumberFieldInputError(f"cannot parse {text!r} as a polynomial in x over QQ") from e
    return from_sympy(poly)


# ---------------------------------------------------------------------------
# Polynomials over Q
# ---------------------------------------------------------------------------


def factor(f: Polynomial) -> Dict[Polynomial, int]:
    """Monic irreducible factors of f over Q with multiplicities (sorted by degree)."""
    if f.degree() < 1:
        return {}
    try:
        _, factors = to_sympy(f).factor_list()
    except BasePolynomialError as e:
        raise NumericKernelError(f"factorization over QQ failed for {f!r}") from e
    items = sorted(
        ((from_sympy(g).monic(), int(k)) for g, k in factors),
        key=lambda t: (t[0].degree(), t[0].coeffs),
    )
    out: Dict[Polynomial, int] = {}
    for g, k in items:
        out[g] = out.get(g, 0) + k
    return out


def discriminant(f: Polynomial) -> Fraction:
    if f.degree() < 1:
        raise NumberFieldInputError("discriminant of a constant polynomial")
    try:
        return _to_fraction(to_sympy(f).discriminant())
    except BasePolynomialError as e:
        raise NumericKernelError(f"discriminant failed for {f!r}") from e


def norm_resultant(modulus: Polynomial, rows: Sequence[Polynomial], shift: int) -> Polynomial:
    """
    N(x) = Res_t( m(t), sum_j c_j(t) * (x - shift*t)^j )

    ``rows[j]`` is the coefficient c_j written as a polynomial in the
    generator t of Q[t]/(m).  This is the norm used by Trager's algorithm and
    by the primitive-element construction of a tower collapse.
    """
    lin = _X - shift * _T
    g_expr = sympy.Integer(0)
    for j, c in enumerate(rows):
        if c:
            g_expr += to_sympy(c, _T).as_expr() * lin ** j
    try:
        r = sympy.resultant(to_sympy(modulus, _T).as_expr(), sympy.expand(g_expr), _T)
        return from_sympy(Poly(r, _X, domain=_SQQ))
    except BasePolynomialError as e:
        raise NumericKernelError("resultant computation failed") from e


def real_root_count(f: Polynomial) -> int:
    try:
        return int(to_sympy(f).count_roots())
    except BasePolynomialError as e:
        raise NumericKernelError(f"real root count failed for {f!r}") from e


def cyclotomic_polynomial(n: int) -> Polynomial:
    if not isinstance(n, int) or n < 1:
        raise NumberFieldInputError(f"cyclotomic order must be int >= 1, got {n!r}")
    return from_sympy(sympy.cyclotomic_poly(n, _X, polys=True))


# ---------------------------------------------------------------------------
# Integers
# ---------------------------------------------------------------------------


def is_square(n: int) -> bool:
    return n >= 0 and math.isqrt(n) ** 2 == n


def next_prime(p: int) -> int:
    return int(sympy.nextprime(p))


def factor_integer(n: int) -> Dict[int, int]:
    if n == 0:
        raise NumberFieldInputError("cannot factor 0")
    return {int(p): int(e) for p, e in sympy.factorint(abs(n)).items()}


def totient(n: int) -> int:
    return int(sympy.totient(n))


# ---------------------------------------------------------------------------
# Reduction modulo a prime
# ---------------------------------------------------------------------------


def reduce_mod_p(f: Polynomial, p: int) -> Optional[List[int]]:
    """Coefficients (high → low) of f mod p, or None when p divides a denominator."""
    out: List[int] = []
    for c in reversed(f.coeffs):
        if c.denominator % p == 0:
            return None
        out.append(c.numerator * pow(c.denominator, -1, p) % p)
    return out


def _gf_poly(f: Polynomial, p: int) -> Optional[Poly]:
    rep = reduce_mod_p(f, p)
    if rep is None:
        return None
    try:
        return Poly(rep, _X, modulus=p)
    except BasePolynomialError as e:
        raise NumericKernelError(f"cannot reduce {f!r} modulo {p}") from e


def _gf_is_squarefree(g: Poly) -> bool:
    # Poly.is_sqf misses p-th powers such as x^2 + 1 = (x + 1)^2 mod 2
    try:
        _, parts = g.sqf_list()
    except BasePolynomialError as e:
        raise NumericKernelError(f"squarefree decomposition of {g!r} failed") from e
    return all(k == 1 for _, k in parts)


def has_good_reduction(f: Polynomial, p: int) -> bool:
    """Reduction mod p keeps the degree and stays squarefree."""
    g = _gf_poly(f, p)
    if g is None or g.degree() != f.degree():
        return False
    return _gf_is_squarefree(g)


def is_squarefree_mod_p(f: Polynomial, p: int) -> bool:
    g = _gf_poly(f, p)
    if g is None:
        return False
    return _gf_is_squarefree(g)


def factor_shape_mod_p(f: Polynomial, p: int) -> Counter:
    """Multiset of the degrees of the irreducible factors of f mod p."""
    g = _gf_poly(f, p)
    if g is None:
        raise NumberFieldInputError(f"{p} divides a denominator of {f!r}")
    try:
        _, factors = g.factor_list()
    except BasePolynomialError as e:
        raise NumericKernelError(f"factorization of {f!r} mod {p} failed") from e
    shape: Counter = Counter()
    for h, k in factors:
        shape[h.degree()] += int(k)
    return shape


def cofactor_mod_p(f: Polynomial, p: int) -> List[int]:
    """f divided by its first irreducible factor mod p, lifted to 0..p-1 (low → high)."""
    g = _gf_poly(f, p)
    if g is None:
        raise NumberFieldInputError(f"{p} divides a denominator of {f!r}")
    try:
        _, factors = g.factor_list()
        q = g.exquo(factors[0][0])
    except BasePolynomialError as e:
        raise NumericKernelError(f"factorization of {f!r} mod {p} failed") from e
    return [int(c) % p for c in reversed(q.all_coeffs())]


# ---------------------------------------------------------------------------
# Floating conjugates
# ---------------------------------------------------------------------------


def complex_roots(f: Polynomial) -> _np.ndarray:
    """All complex roots of f (floating point, numpy companion-matrix solver)."""
    if f.degree() < 1:
        return _np.array([], dtype=_np.complex128)
    coeffs = _np.array([float(c) for c in reversed(f.coeffs)], dtype=_np.float64)
    return _np.roots(coeffs)


def evaluate_at(f: Polynomial, points: _np.ndarray) -> _np.ndarray:
    coeffs = [float(c) for c in reversed(f.coeffs)] or [0.0]
    return _np.polyval(_np.array(coeffs, dtype=_np.float64), points)


# ---------------------------------------------------------------------------
# Exact linear algebra
# ---------------------------------------------------------------------------


class Matrix:
    """Dense matrix over an exact field, stored as a numpy object array."""

    def __init__(self, field, rows: Sequence[Sequence[Any]]):
        rows = [list(r) for r in rows]
        n = len(rows)
        m = len(rows[0]) if rows else 0
        for r in rows:
            if len(r) != m:
                raise NumberFieldInputError("matrix rows must have equal length")
        self.field = field
        self.data = _np.empty((n, m), dtype=object)
        for i, r in enumerate(rows):
            for j, x in enumerate(r):
                self.data[i, j] = field(x)

    @classmethod
    def _wrap(cls, field, rows: List[List[Any]], ncols: int) -> "Matrix":
        obj = cls.__new__(cls)
        obj.field = field
        obj.data = _np.empty((len(rows), ncols), dtype=object)
        for i, r in enumerate(rows):
            for j, x in enumerate(r):
                obj.data[i, j] = x
        return obj

    def nrows(self) -> int:
        return self.data.shape[0]

    def ncols(self) -> int:
        return self.data.shape[1]

    def __getitem__(self, key):
        return self.data[key]

    def transpose(self) -> "Matrix":
        t = self.data.T
        return Matrix._wrap(self.field, [list(r) for r in t], t.shape[1])

    def _rows(self) -> List[List[Any]]:
        return [list(r) for r in self.data]

    def rref(self) -> Tuple["Matrix", List[int]]:
        A = self._rows()
        n_rows, n_cols = self.nrows(), self.ncols()
        one = self.field.one()
        pivots: List[int] = []
        row = 0
        for col in range(n_cols):
            if row == n_rows:
                break
            pivot = None
            for r in range(row, n_rows):
                if A[r][col]:
                    pivot = r
                    break
            if pivot is None:
                continue
            if pivot != row:
                A[row], A[pivot] = A[pivot], A[row]
            inv = one / A[row][col]
            A[row] = [v * inv for v in A[row]]
            for r in range(n_rows):
                if r == row or not A[r][col]:
                    continue
                factor_ = A[r][col]
                A[r] = [a - factor_ * b for a, b in zip(A[r], A[row])]
            pivots.append(col)
            row += 1
        return Matrix._wrap(self.field, A, n_cols), pivots

    def rank(self) -> int:
        return len(self.rref()[1])

    def determinant(self):
        n = self.nrows()
        if n != self.ncols():
            raise NumberFieldInputError("determinant of a non-square matrix")
        A = self._rows()
        det = self.field.one()
        for col in range(n):
            pivot = None
            for r in range(col, n):
                if A[r][col]:
                    pivot = r
                    break
            if pivot is None:
                return self.field.zero()
            if pivot != col:
                A[col], A[pivot] = A[pivot], A[col]
                det = -det
            p = A[col][col]
            det = det * p
            for r in range(col + 1, n):
                if not A[r][col]:
                    continue
                factor_ = A[r][col] / p
                A[r] = [a - factor_ * b for a, b in zip(A[r], A[col])]
        return det

    def solve_right(self, b: Sequence[Any]) -> List[Any]:
        """One solution x of self * x = b (free variables set to zero)."""
        n_rows, n_cols = self.nrows(), self.ncols()
        if len(b) != n_rows:
            raise NumberFieldInputError("right-hand side length mismatch")
        aug = [list(r) + [self.field(v)] for r, v in zip(self._rows(), b)]
        R, pivots = Matrix._wrap(self.field, aug, n_cols + 1).rref()
        if n_cols in pivots:
            raise NumericKernelError("linear system is inconsistent")
        x = [self.field.zero()] * n_cols
        for i, c in enumerate(pivots):
            x[c] = R[i, n_cols]
        return x

    def nullspace(self) -> List[List[Any]]:
        """Basis of {x : self * x = 0}."""
        R, pivots = self.rref()
        n_cols = self.ncols()
        zero, one = self.field.zero(), self.field.one()
        basis: List[List[Any]] = []
        for free in (c for c in range(n_cols) if c not in pivots):
            v = [zero] * n_cols
            v[free] = one
            for i, c in enumerate(pivots):
                v[c] = -R[i, free]
            basis.append(v)
        return basis

    def __repr__(self) -> str:
        return f"Matrix({self.data.tolist()})"
