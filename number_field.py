#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
================================================================================
Simple number fields and their elements (单代数扩张)
================================================================================

A ``NumberField`` is K = k[x]/(f) for an irreducible f over k, where k is QQ
(absolute field) or another ``NumberField`` (relative field).

Every field is also a node of the embedding lattice:

    lattice.subs    strong, ordered list of morphisms  S -> K
    lattice.sub_of  weakref.ref list of superfields    K -> T

Fields are identified by ``uid`` (assigned at construction, never reused),
never by structural equality: two fields built from the same polynomial with
``cached=False`` are different nodes.

Red-lines:
  - elements are always reduced modulo the defining polynomial
  - mixed-field arithmetic goes through the lattice (nf_lattice.force_op)
  - equality between unrelated fields is False, never an exception
================================================================================
"""

from __future__ import annotations

import itertools
import logging
import operator
import weakref
from dataclasses import dataclass, field
from fractions import Fraction
from typing import Any, List, Optional, Sequence, Tuple

import algebra_backend as kernel
from algebra_backend import Matrix
from nf_errors import NoCoercionError, NumberFieldInputError, StructuralMismatchError
from nf_poly import QQ, Polynomial, as_fraction_strict

_logger = logging.getLogger(__name__)

_uid_counter = itertools.count(1)


# =============================================================================
# Section 0: lattice metadata shared by every field
# =============================================================================


@dataclass
class FieldLattice:
    """Forward (strong) and backward (weak) embedding links of one field."""

    subs: List[Any] = field(default_factory=list)
    sub_of: List[weakref.ref] = field(default_factory=list)

    def live_superfields(self) -> List[Any]:
        """Dereference ``sub_of``, pruning dead references in place."""
        live = [(r, r()) for r in self.sub_of]
        kept = [r for r, s in live if s is not None]
        if len(kept) != len(self.sub_of):
            _logger.debug("pruned %d dead superfield reference(s)", len(self.sub_of) - len(kept))
            self.sub_of[:] = kept
        return [s for _, s in live if s is not None]


class LatticeNode:
    """Identity and optional tags common to simple and non-simple fields."""

    is_simple = True

    def _init_node(self, name: Optional[str]) -> None:
        self.uid = next(_uid_counter)
        self.lattice = FieldLattice()
        self.name = name
        self.cyclotomic_order: Optional[int] = None
        self._absolute = None

    def is_cyclotomic_type(self) -> Tuple[bool, int]:
        if self.cyclotomic_order is None:
            return False, 0
        return True, self.cyclotomic_order

    def is_absolute(self) -> bool:
        return self.base_field is QQ


def in_base_chain(K, k) -> bool:
    """True when k is a proper member of K's base-field chain (QQ excluded)."""
    b = K.base_field
    while b is not None and b is not QQ:
        if b is k:
            return True
        b = b.base_field
    return False


# =============================================================================
# Section 1: shared element arithmetic
# =============================================================================


def _force(op, *elements, throw_error: bool = True):
    from nf_lattice import force_op

    return force_op(op, *elements, throw_error=throw_error)


class FieldElement:
    """
    Operator plumbing shared by simple and non-simple elements.

    Subclasses implement ``_add``, ``_neg``, ``_mul``, ``_eq``, ``inverse``,
    ``is_rational`` and ``to_rational`` for same-parent operands.
    """

    __slots__ = ()

    def _coerce_other(self, other: Any):
        """Same-parent element, ``None`` when a common superfield is needed, or NotImplemented."""
        if isinstance(other, FieldElement):
            if other.parent is self.parent:
                return other
            if in_base_chain(self.parent, other.parent):
                return self.parent(other)
            return None
        if isinstance(other, Polynomial):
            return NotImplemented
        if isinstance(other, (float, complex)):
            raise NumberFieldInputError(f"float/complex operand is forbidden: {other!r}")
        try:
            return self.parent(as_fraction_strict(other))
        except NumberFieldInputError:
            return NotImplemented

    def __add__(self, other: Any):
        o = self._coerce_other(other)
        if o is None:
            return _force(operator.add, self, other)
        return o if o is NotImplemented else self._add(o)

    def __radd__(self, other: Any):
        o = self._coerce_other(other)
        if o is None:
            return _force(operator.add, other, self)
        return o if o is NotImplemented else o._add(self)

    def __sub__(self, other: Any):
        o = self._coerce_other(other)
        if o is None:
            return _force(operator.sub, self, other)
        return o if o is NotImplemented else self._add(o._neg())

    def __rsub__(self, other: Any):
        o = self._coerce_other(other)
        if o is None:
            return _force(operator.sub, other, self)
        return o if o is NotImplemented else o._add(self._neg())

    def __mul__(self, other: Any):
        o = self._coerce_other(other)
        if o is None:
            return _force(operator.mul, self, other)
        return o if o is NotImplemented else self._mul(o)

    def __rmul__(self, other: Any):
        o = self._coerce_other(other)
        if o is None:
            return _force(operator.mul, other, self)
        return o if o is NotImplemented else o._mul(self)

    def __truediv__(self, other: Any):
        o = self._coerce_other(other)
        if o is None:
            return _force(operator.truediv, self, other)
        return o if o is NotImplemented else self._mul(o.inverse())

    def __rtruediv__(self, other: Any):
        o = self._coerce_other(other)
        if o is None:
            return _force(operator.truediv, other, self)
        return o if o is NotImplemented else o._mul(self.inverse())

    def __neg__(self):
        return self._neg()

    def __pos__(self):
        return self

    def __pow__(self, n: int):
        if not isinstance(n, int) or isinstance(n, bool):
            raise NumberFieldInputError(f"exponent must be int, got {n!r}")
        base = self
        if n < 0:
            base, n = self.inverse(), -n
        result = self.parent.one()
        while n:
            if n & 1:
                result = result._mul(base)
            base = base._mul(base)
            n >>= 1
        return result

    def __eq__(self, other: Any) -> bool:
        try:
            o = self._coerce_other(other)
        except NumberFieldInputError:
            return False
        if o is NotImplemented:
            return NotImplemented
        if o is None:
            return bool(_force(operator.eq, self, other, throw_error=False))
        return self._eq(o)

    def __ne__(self, other: Any) -> bool:
        r = self.__eq__(other)
        return r if r is NotImplemented else not r

    def __hash__(self) -> int:
        # invariant under embeddings, equals hash(r) for a rational r
        return hash(self.absolute_trace() / self.parent.absolute_degree)

    def is_integer(self) -> bool:
        return self.is_rational() and self.to_rational().denominator == 1

    def trace(self):
        """Trace over the base field."""
        M = self.representation_matrix()
        acc = M.field.zero()
        for i in range(M.nrows()):
            acc = acc + M[i, i]
        return acc

    def norm(self):
        """Norm over the base field."""
        return self.representation_matrix().determinant()

    def absolute_norm(self) -> Fraction:
        n = self.norm()
        return n if isinstance(n, Fraction) else n.absolute_norm()

    def absolute_trace(self) -> Fraction:
        t = self.trace()
        return t if isinstance(t, Fraction) else t.absolute_trace()

    def minpoly(self) -> Polynomial:
        """Minimal polynomial over the base field (power-basis nullspace)."""
        K = self.parent
        k = K.base_field
        powers = [K.one()]
        for _ in range(K.degree):
            powers.append(powers[-1]._mul(self))
            cols = [p.coordinates() for p in powers]
            M = Matrix(k, [[c[i] for c in cols] for i in range(K.degree)])
            ns = M.nullspace()
            if ns:
                return Polynomial(k, ns[0]).monic()
        raise StructuralMismatchError(f"no minimal polynomial found for {self!r}")

    def representation_matrix(self) -> Matrix:
        """Rows are the coordinates of self * b_i for the basis b_i of the parent."""
        K = self.parent
        return Matrix(K.base_field, [(self._mul(b)).coordinates() for b in K.basis()])


# =============================================================================
# Section 2: simple field elements
# =============================================================================


def _strip(seq: Sequence[Any]) -> Tuple[Any, ...]:
    n = len(seq)
    while n and not seq[n - 1]:
        n -= 1
    return tuple(seq[:n])


class NumberFieldElement(FieldElement):
    """Element of a simple field: power-basis coefficients over the base field."""

    __slots__ = ("parent", "coeffs")

    @classmethod
    def _raw(cls, parent, coeffs: Sequence[Any]) -> "NumberFieldElement":
        obj = cls.__new__(cls)
        obj.parent = parent
        obj.coeffs = _strip(list(coeffs))
        return obj

    def as_polynomial(self) -> Polynomial:
        return Polynomial._raw(self.parent.base_field, self.coeffs)

    def coefficient(self, i: int):
        if 0 <= i < len(self.coeffs):
            return self.coeffs[i]
        return self.parent.base_field.zero()

    def coordinates(self) -> List[Any]:
        return [self.coefficient(i) for i in range(self.parent.degree)]

    def __bool__(self) -> bool:
        return bool(self.coeffs)

    def _add(self, o: "NumberFieldElement") -> "NumberFieldElement":
        a, b = self.coeffs, o.coeffs
        if len(a) < len(b):
            a, b = b, a
        out = list(a)
        for i, c in enumerate(b):
            out[i] = out[i] + c
        return NumberFieldElement._raw(self.parent, out)

    def _neg(self) -> "NumberFieldElement":
        return NumberFieldElement._raw(self.parent, [-c for c in self.coeffs])

    def _mul(self, o: "NumberFieldElement") -> "NumberFieldElement":
        return self.parent._from_polynomial(self.as_polynomial() * o.as_polynomial())

    def _eq(self, o: "NumberFieldElement") -> bool:
        return self.coeffs == o.coeffs

    def inverse(self) -> "NumberFieldElement":
        if not self.coeffs:
            raise ZeroDivisionError("inverse of zero in a number field")
        g, s, _ = self.as_polynomial().gcdex(self.parent.pol)
        if g.degree() != 0:
            raise NumberFieldInputError(f"{self!r} is not invertible: the defining polynomial is reducible")
        return self.parent._from_polynomial(s)

    def is_rational(self) -> bool:
        if len(self.coeffs) > 1:
            return False
        if not self.coeffs or self.parent.base_field is QQ:
            return True
        return self.coeffs[0].is_rational()

    def to_rational(self) -> Fraction:
        if not self.is_rational():
            raise NoCoercionError(f"{self!r} is not rational")
        return QQ(self.coefficient(0))

    def is_integral(self) -> bool:
        """Integral over Z (minimal polynomial over Q has integer coefficients)."""
        if self.parent.base_field is not QQ:
            from nf_splitting import absolute_simple_field

            _, _, to_abs = absolute_simple_field(self.parent)
            return to_abs(self).is_integral()
        return all(c.denominator == 1 for c in self.minpoly().coeffs)

    def __repr__(self) -> str:
        return self.as_polynomial().to_string(self.parent.var)


# =============================================================================
# Section 3: simple fields
# =============================================================================


class NumberField(LatticeNode):
    """
    K = base[x]/(pol).

    ``check`` verifies irreducibility over the base (internal callers that
    already know it pass ``check=False``).
    """

    is_simple = True

    def __init__(self, pol: Polynomial, base=QQ, *, var: str = "a", name: Optional[str] = None, check: bool = True):
        if not isinstance(pol, Polynomial):
            raise NumberFieldInputError(f"defining polynomial must be a Polynomial, got {type(pol).__name__}")
        if not isinstance(var, str) or not var:
            raise NumberFieldInputError("generator name must be a non-empty str")
        if pol.field is not base:
            if pol.field is not QQ:
                raise StructuralMismatchError(f"polynomial over {pol.field!r} cannot define an extension of {base!r}")
            pol = pol.change_ring(base)
        if pol.degree() < 1:
            raise NumberFieldInputError("defining polynomial must have degree >= 1")
        if check:
            from nf_factor import is_irreducible

            if not is_irreducible(pol):
                raise NumberFieldInputError(f"defining polynomial {pol!r} is not irreducible over {base!r}")
        self.pol = pol
        self.base_field = base
        self.var = var
        self.degree = pol.degree()
        self.absolute_degree = self.degree * base.absolute_degree
        self._nice = base is QQ and pol.leading_coefficient() == 1 and all(c.denominator == 1 for c in pol.coeffs)
        self._init_node(name)
        if base is not QQ:
            base.lattice.sub_of.append(weakref.ref(self))
            _logger.debug("relative field %s registered above its base %s", self.uid, base.uid)

    # ------------------------------------------------------------------
    # element construction
    # ------------------------------------------------------------------

    def _from_polynomial(self, p: Polynomial) -> NumberFieldElement:
        return NumberFieldElement._raw(self, (p % self.pol).coeffs)

    def __call__(self, x: Any = 0) -> NumberFieldElement:
        if isinstance(x, NumberFieldElement) and x.parent is self:
            return x
        if isinstance(x, Polynomial):
            if x.field is self.base_field:
                return self._from_polynomial(x)
            if x.field is QQ:
                return self._from_polynomial(x.change_ring(self.base_field))
            raise StructuralMismatchError(f"polynomial over {x.field!r} cannot be read in {self!r}")
        if isinstance(x, (list, tuple)):
            if len(x) > self.degree:
                raise NumberFieldInputError(f"too many coefficients ({len(x)}) for a degree-{self.degree} field")
            return self._from_polynomial(Polynomial(self.base_field, x))
        if isinstance(x, FieldElement):
            if in_base_chain(self, x.parent):
                return NumberFieldElement._raw(self, (self.base_field(x),))
            from nf_lattice import force_coerce

            return force_coerce(self, x)
        return NumberFieldElement._raw(self, (self.base_field(x),))

    def zero(self) -> NumberFieldElement:
        return NumberFieldElement._raw(self, ())

    def one(self) -> NumberFieldElement:
        return NumberFieldElement._raw(self, (self.base_field.one(),))

    def gen(self) -> NumberFieldElement:
        return self._from_polynomial(Polynomial.gen(self.base_field))

    def basis(self) -> List[NumberFieldElement]:
        one = self.base_field.one()
        zero = self.base_field.zero()
        return [NumberFieldElement._raw(self, [zero] * i + [one]) for i in range(self.degree)]

    def defining_polynomial(self) -> Polynomial:
        return self.pol

    def set_cyclotomic_order(self, n: int) -> None:
        if self.base_field is not QQ or self.pol.monic() != kernel.cyclotomic_polynomial(n):
            raise NumberFieldInputError(f"{self!r} is not defined by the {n}-th cyclotomic polynomial")
        self.cyclotomic_order = n

    def __repr__(self) -> str:
        if self.name:
            return self.name
        return f"Number field over {self.base_field!r} with defining polynomial {self.pol.to_string('x')}"


# =============================================================================
# Section 4: constructors
# =============================================================================


_field_cache: "weakref.WeakValueDictionary[Tuple[Any, ...], NumberField]" = weakref.WeakValueDictionary()


def number_field(f: Any, var: str = "a", *, base=None, name: Optional[str] = None,
                 cached: bool = True, check: bool = True) -> NumberField:
    """
    Simple extension defined by ``f``.

    ``f`` may be a Polynomial, a coefficient list (low → high) or a string
    such as ``"x^3 - 2"``.  With ``cached=True`` a live field with the same
    base, polynomial and variable name is returned instead of a new node.
    """
    if isinstance(f, str):
        f = kernel.parse_polynomial(f)
    elif isinstance(f, (list, tuple)):
        f = Polynomial(base if base is not None else QQ, f)
    elif not isinstance(f, Polynomial):
        raise NumberFieldInputError(f"cannot build a number field from {type(f).__name__}")
    if base is None:
        base = f.field
    if f.field is not base:
        f = f.change_ring(base)
    key = (base.uid, f.coeffs, var)
    if cached:
        K = _field_cache.get(key)
        if K is not None:
            return K
    K = NumberField(f, base, var=var, name=name, check=check)
    if cached:
        _field_cache[key] = K
    return K


def cyclotomic_field(n: int, *, cached: bool = True) -> NumberField:
    """Q(z_n), tagged with its cyclotomic order."""
    if not isinstance(n, int) or isinstance(n, bool) or n < 1:
        raise NumberFieldInputError(f"cyclotomic order must be an int >= 1, got {n!r}")
    K = number_field(kernel.cyclotomic_polynomial(n), f"z_{n}", cached=cached, check=False)
    if K.cyclotomic_order is None:
        K.cyclotomic_order = n
        K.name = f"Cyclotomic field of order {n}"
    return K


def quadratic_field(d: int, *, cached: bool = True, check: bool = True) -> NumberField:
    """Q(sqrt(d)) for a non-square integer d."""
    d = as_fraction_strict(d, name="d")
    if d.denominator != 1:
        raise NumberFieldInputError("quadratic_field expects an integer")
    d = d.numerator
    if check and kernel.is_square(d):
        raise NumberFieldInputError(f"{d} is a square, x^2 - {d} is reducible")
    if d.bit_length() > 100:
        digits = str(abs(d))
        lead = int(digits[:4]) if d > 0 else -int(digits[:4])
        var = f"sqrt({lead}..{digits[-4:]})"
    else:
        var = f"sqrt({d})"
    K = number_field(Polynomial(QQ, [-d, 0, 1]), var, cached=cached, check=False)
    if K.name is None:
        K.name = f"{'Real' if d > 0 else 'Imaginary'} quadratic field defined by x^2 - {d}"
    return K


def radical_extension(n: int, a: Any, *, base=QQ, var: str = "a", cached: bool = True,
                      check: bool = True) -> NumberField:
    """base(a^(1/n)) defined by x^n - a."""
    if not isinstance(n, int) or n < 1:
        raise NumberFieldInputError(f"radical degree must be an int >= 1, got {n!r}")
    coeffs = [-base(a)] + [base.zero()] * (n - 1) + [base.one()]
    return number_field(Polynomial(base, coeffs), var, base=base, cached=cached, check=check)


def wildanger_field(n: int, B: Any, var: str = "a", *, cached: bool = True, check: bool = True) -> NumberField:
    """Field defined by x^n + sum_{i<n} (-1)^(n-i) B x^i."""
    if not isinstance(n, int) or n < 1:
        raise NumberFieldInputError(f"degree must be an int >= 1, got {n!r}")
    B = as_fraction_strict(B, name="B")
    coeffs = [(-1) ** (n - i) * B for i in range(n)] + [Fraction(1)]
    return number_field(Polynomial(QQ, coeffs), var, cached=cached, check=check)


def rationals_as_number_field() -> NumberField:
    """Q presented as the degree-1 field Q[x]/(x - 1)."""
    return number_field(Polynomial(QQ, [-1, 1]), "a", check=False)


# =============================================================================
# Section 5: field invariants
# =============================================================================


def is_defining_polynomial_nice(K) -> bool:
    """Absolute field whose defining polynomial is monic with integer coefficients."""
    if not K.is_simple:
        return all(p.leading_coefficient() == 1 and all(c.denominator == 1 for c in p.coeffs) for p in K.pols)
    return K._nice


def basis(K) -> List[Any]:
    return K.basis()


def _absolute_pol(K) -> Polynomial:
    if K.is_simple and K.base_field is QQ:
        return K.pol
    from nf_splitting import absolute_simple_field

    return absolute_simple_field(K)[0].pol


def signature(K) -> Tuple[int, int]:
    """(r, s): number of real embeddings and of pairs of complex embeddings."""
    f = _absolute_pol(K)
    r = kernel.real_root_count(f)
    return r, (f.degree() - r) // 2


def discriminant(K) -> Fraction:
    """Discriminant of the absolute defining polynomial."""
    return kernel.discriminant(_absolute_pol(K))


def set_name(K, name: str) -> None:
    if not isinstance(name, str):
        raise NumberFieldInputError("field name must be str")
    K.name = name
