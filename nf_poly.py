#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
================================================================================
Dense univariate polynomials over an exact coefficient field
================================================================================

Coefficient fields:
  - QQ (``RationalField``): coefficients are ``fractions.Fraction``
  - any number field of this project: coefficients are its elements

The only contract a coefficient field has to honour is

    field(x)      -> canonical element (strict conversion, no floats)
    field.zero()  /  field.one()

and its elements must support ``+ - * /`` and truthiness (zero is falsy).

Red-lines:
  - exact arithmetic only; float / complex input is rejected
  - coefficients are stored low → high, trailing zeros stripped
  - mixing two coefficient fields inside one operation is a hard error
================================================================================
"""

from __future__ import annotations

import numbers
from fractions import Fraction
from typing import Any, Callable, List, Optional, Sequence, Tuple

from nf_errors import NoCoercionError, NumberFieldInputError, StructuralMismatchError


# =============================================================================
# Section 0: strict rational conversion
# =============================================================================


def as_fraction_strict(x: Any, *, name: str = "value") -> Fraction:
    """
    Convert a rational-like input to Fraction, rejecting float/complex.

    Accepted:
      - int / bool
      - Fraction and other ``numbers.Rational`` (sympy Rational, numpy ints)
      - str (e.g. "3/2")
    """
    if isinstance(x, Fraction):
        return x
    if isinstance(x, bool):
        return Fraction(int(x))
    if isinstance(x, int):
        return Fraction(x)
    if isinstance(x, str):
        try:
            return Fraction(x.strip())
        except (ValueError, ZeroDivisionError) as e:
            raise NumberFieldInputError(f"{name} must be a rational string like '3/2', got {x!r}") from e
    if isinstance(x, float):
        raise NumberFieldInputError(f"{name} must be rational (int/Fraction/str); float is forbidden: {x!r}")
    if isinstance(x, complex):
        raise NumberFieldInputError(f"{name} must be rational; complex is forbidden: {x!r}")
    if isinstance(x, numbers.Integral):
        return Fraction(int(x))
    if isinstance(x, numbers.Rational):
        return Fraction(int(x.numerator), int(x.denominator))
    raise NumberFieldInputError(f"{name} must be rational, got {type(x).__name__}")


# =============================================================================
# Section 1: the rational field
# =============================================================================


class RationalField:
    """
    The rational numbers, terminal base of every tower.

    QQ is not a node of the embedding lattice: it embeds canonically into
    every field, so it carries no lattice metadata.
    """

    _instance: Optional["RationalField"] = None

    uid = 0
    degree = 1
    absolute_degree = 1
    base_field = None
    cyclotomic_order = None
    is_simple = True
    name = "Rational Field"

    def __new__(cls) -> "RationalField":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __call__(self, x: Any = 0) -> Fraction:
        if isinstance(x, Fraction):
            return x
        if hasattr(x, "is_rational") and hasattr(x, "to_rational"):
            if not x.is_rational():
                raise NoCoercionError(f"{x!r} is not a rational number")
            return x.to_rational()
        return as_fraction_strict(x)

    def zero(self) -> Fraction:
        return Fraction(0)

    def one(self) -> Fraction:
        return Fraction(1)

    def __repr__(self) -> str:
        return "Rational Field"

    def __reduce__(self):
        return (RationalField, ())


QQ = RationalField()


def parent_of(x: Any):
    """Field an element lives in; rational-like values live in QQ."""
    p = getattr(x, "parent", None)
    if p is not None and hasattr(p, "absolute_degree"):
        return p
    QQ(x)
    return QQ


# =============================================================================
# Section 2: dense polynomials
# =============================================================================


def _strip(seq: Sequence[Any]) -> Tuple[Any, ...]:
    n = len(seq)
    while n and not seq[n - 1]:
        n -= 1
    return tuple(seq[:n])


def _fmt_scalar(c: Any) -> str:
    s = str(c)
    if isinstance(c, Fraction) or s.lstrip("-").replace("/", "").isdigit():
        return s
    return f"({s})"


class Polynomial:
    """Univariate polynomial over ``field``; ``coeffs[0]`` is the constant term."""

    __slots__ = ("field", "coeffs")

    def __init__(self, field, coeffs: Sequence[Any] = ()):
        self.field = field
        self.coeffs = _strip([field(c) for c in coeffs])

    @classmethod
    def _raw(cls, field, coeffs: Sequence[Any]) -> "Polynomial":
        # coefficients are already elements of ``field``
        obj = cls.__new__(cls)
        obj.field = field
        obj.coeffs = _strip(list(coeffs))
        return obj

    @classmethod
    def gen(cls, field) -> "Polynomial":
        return cls._raw(field, [field.zero(), field.one()])

    @classmethod
    def constant(cls, field, c: Any) -> "Polynomial":
        return cls._raw(field, [field(c)])

    # ------------------------------------------------------------------
    # structure
    # ------------------------------------------------------------------

    def degree(self) -> int:
        return len(self.coeffs) - 1

    def is_zero(self) -> bool:
        return not self.coeffs

    def __bool__(self) -> bool:
        return bool(self.coeffs)

    def is_constant(self) -> bool:
        return len(self.coeffs) <= 1

    def coefficient(self, i: int):
        if 0 <= i < len(self.coeffs):
            return self.coeffs[i]
        return self.field.zero()

    def leading_coefficient(self):
        return self.coeffs[-1] if self.coeffs else self.field.zero()

    def monic(self) -> "Polynomial":
        if not self.coeffs:
            return self
        inv = self.field.one() / self.coeffs[-1]
        return Polynomial._raw(self.field, [c * inv for c in self.coeffs])

    def derivative(self) -> "Polynomial":
        return Polynomial._raw(self.field, [self.coeffs[i] * i for i in range(1, len(self.coeffs))])

    # ------------------------------------------------------------------
    # ring operations
    # ------------------------------------------------------------------

    def _lift(self, other: Any) -> "Polynomial":
        if isinstance(other, Polynomial):
            if other.field is not self.field:
                raise StructuralMismatchError(
                    f"polynomials over different fields: {self.field!r} vs {other.field!r}"
                )
            return other
        return Polynomial.constant(self.field, other)

    def __add__(self, other: Any) -> "Polynomial":
        o = self._lift(other)
        a, b = self.coeffs, o.coeffs
        if len(a) < len(b):
            a, b = b, a
        out = list(a)
        for i, c in enumerate(b):
            out[i] = out[i] + c
        return Polynomial._raw(self.field, out)

    __radd__ = __add__

    def __neg__(self) -> "Polynomial":
        return Polynomial._raw(self.field, [-c for c in self.coeffs])

    def __sub__(self, other: Any) -> "Polynomial":
        return self + (-self._lift(other))

    def __rsub__(self, other: Any) -> "Polynomial":
        return self._lift(other) - self

    def __mul__(self, other: Any) -> "Polynomial":
        if not isinstance(other, Polynomial):
            s = self.field(other)
            return Polynomial._raw(self.field, [c * s for c in self.coeffs])
        o = self._lift(other)
        if not self.coeffs or not o.coeffs:
            return Polynomial._raw(self.field, [])
        zero = self.field.zero()
        out = [zero] * (len(self.coeffs) + len(o.coeffs) - 1)
        for i, a in enumerate(self.coeffs):
            if not a:
                continue
            for j, b in enumerate(o.coeffs):
                out[i + j] = out[i + j] + a * b
        return Polynomial._raw(self.field, out)

    __rmul__ = __mul__

    def __pow__(self, n: int) -> "Polynomial":
        if not isinstance(n, int) or n < 0:
            raise NumberFieldInputError(f"polynomial exponent must be a non-negative int, got {n!r}")
        result = Polynomial.constant(self.field, 1)
        base = self
        while n:
            if n & 1:
                result = result * base
            base = base * base
            n >>= 1
        return result

    def __divmod__(self, other: Any) -> Tuple["Polynomial", "Polynomial"]:
        o = self._lift(other)
        if not o.coeffs:
            raise ZeroDivisionError("polynomial division by zero")
        rem = list(self.coeffs)
        dq = len(rem) - len(o.coeffs)
        if dq < 0:
            return Polynomial._raw(self.field, []), self
        inv_lc = self.field.one() / o.coeffs[-1]
        quot = [self.field.zero()] * (dq + 1)
        m = len(o.coeffs) - 1
        for k in range(dq, -1, -1):
            c = rem[k + m] * inv_lc
            quot[k] = c
            if not c:
                continue
            for j, b in enumerate(o.coeffs):
                rem[k + j] = rem[k + j] - c * b
        return Polynomial._raw(self.field, quot), Polynomial._raw(self.field, rem[:m])

    def __floordiv__(self, other: Any) -> "Polynomial":
        return divmod(self, other)[0]

    def __mod__(self, other: Any) -> "Polynomial":
        return divmod(self, other)[1]

    def exact_div(self, other: Any) -> "Polynomial":
        q, r = divmod(self, other)
        if r:
            raise NumberFieldInputError(f"{other!r} does not divide {self!r}")
        return q

    def gcd(self, other: "Polynomial") -> "Polynomial":
        """Monic gcd (the zero polynomial for gcd(0, 0))."""
        a, b = self, self._lift(other)
        while b:
            a, b = b, a % b
        return a.monic()

    def gcdex(self, other: "Polynomial") -> Tuple["Polynomial", "Polynomial", "Polynomial"]:
        """(g, s, t) with s*self + t*other = g, g monic."""
        o = self._lift(other)
        one = Polynomial.constant(self.field, 1)
        zero = Polynomial._raw(self.field, [])
        r0, r1 = self, o
        s0, s1 = one, zero
        t0, t1 = zero, one
        while r1:
            q, r = divmod(r0, r1)
            r0, r1 = r1, r
            s0, s1 = s1, s0 - q * s1
            t0, t1 = t1, t0 - q * t1
        if not r0:
            return r0, s0, t0
        inv = self.field.one() / r0.leading_coefficient()
        return r0 * inv, s0 * inv, t0 * inv

    def squarefree_part(self) -> "Polynomial":
        if self.degree() < 1:
            return self.monic()
        return (self // self.gcd(self.derivative())).monic()

    def is_squarefree(self) -> bool:
        if self.degree() < 1:
            return True
        return self.gcd(self.derivative()).degree() == 0

    # ------------------------------------------------------------------
    # evaluation / substitution
    # ------------------------------------------------------------------

    def __call__(self, x: Any):
        """Horner evaluation; ``x`` may live in any ring the coefficients act on."""
        if not self.coeffs:
            return self.field.zero()
        acc = self.coeffs[-1]
        for c in reversed(self.coeffs[:-1]):
            acc = acc * x + c
        return acc

    def compose(self, g: "Polynomial") -> "Polynomial":
        """self(g(x))."""
        g = self._lift(g)
        result = Polynomial._raw(self.field, [])
        for c in reversed(self.coeffs):
            result = result * g + c
        return result

    def map_coefficients(self, fn: Callable[[Any], Any], field) -> "Polynomial":
        return Polynomial(field, [fn(c) for c in self.coeffs])

    def change_ring(self, field) -> "Polynomial":
        """Same polynomial with every coefficient converted into ``field``."""
        if field is self.field:
            return self
        return Polynomial(field, self.coeffs)

    # ------------------------------------------------------------------
    # comparison / display
    # ------------------------------------------------------------------

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, Polynomial):
            return self.field is other.field and self.coeffs == other.coeffs
        try:
            c = self.field(other)
        except (NumberFieldInputError, NoCoercionError, StructuralMismatchError):
            return NotImplemented
        return self.coeffs == _strip([c])

    def __hash__(self) -> int:
        return hash(self.coeffs)

    def to_string(self, var: str = "x") -> str:
        if not self.coeffs:
            return "0"
        terms: List[str] = []
        for i in range(len(self.coeffs) - 1, -1, -1):
            c = self.coeffs[i]
            if not c:
                continue
            mono = "" if i == 0 else (var if i == 1 else f"{var}^{i}")
            if not mono:
                terms.append(_fmt_scalar(c))
            elif c == 1:
                terms.append(mono)
            elif c == -1:
                terms.append(f"-{mono}")
            else:
                terms.append(f"{_fmt_scalar(c)}*{mono}")
        out = terms[0]
        for t in terms[1:]:
            out += f" - {t[1:]}" if t.startswith("-") else f" + {t}"
        return out

    def __repr__(self) -> str:
        return self.to_string("x")


# =============================================================================
# Section 3: interpolation and coprime bases
# =============================================================================


def interpolate(field, xs: Sequence[Any], ys: Sequence[Any]) -> Polynomial:
    """
    Lagrange interpolation over ``field``.

    Returns the unique polynomial p of degree < len(xs) with p(xs[i]) = ys[i].
    The nodes must be pairwise distinct.
    """
    if len(xs) != len(ys):
        raise NumberFieldInputError("interpolation needs as many values as nodes")
    xs = [field(x) for x in xs]
    ys = [field(y) for y in ys]
    X = Polynomial.gen(field)
    result = Polynomial._raw(field, [])
    for i, (xi, yi) in enumerate(zip(xs, ys)):
        basis = Polynomial.constant(field, 1)
        denom = field.one()
        for j, xj in enumerate(xs):
            if i == j:
                continue
            basis = basis * (X - xj)
            denom = denom * (xi - xj)
        if not denom:
            raise NumberFieldInputError("interpolation nodes must be distinct")
        result = result + basis * (yi / denom)
    return result


def coprime_base(polys: Sequence[Polynomial]) -> List[Polynomial]:
    """
    Pairwise coprime monic polynomials with the same set of roots as ``polys``.

    Each refinement replaces a pair (a, b) sharing g = gcd(a, b) by
    (g, a/g, b/g); the total degree strictly drops, so the loop terminates.
    """
    base: List[Polynomial] = []
    pending = [p.monic() for p in polys if p.degree() >= 1]
    while pending:
        a = pending.pop()
        for i, b in enumerate(base):
            g = a.gcd(b)
            if g.degree() > 0:
                base.pop(i)
                for piece in (g, b // g, a // g):
                    if piece.degree() >= 1:
                        pending.append(piece.monic())
                break
        else:
            base.append(a)
    return base
