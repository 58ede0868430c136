#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Non-simple number fields Q[x1, ..., xr] / (f1(x1), ..., fr(xr)).

Elements are sparse maps exponent-tuple -> Fraction in the monomial basis
x1^e1 * ... * xr^er with 0 <= ei < deg(fi).  Products are reduced one
variable at a time with cached remainders x^n mod fi.
"""

from __future__ import annotations

import itertools
import logging
import math
from fractions import Fraction
from typing import Any, Dict, List, Optional, Sequence, Tuple

import algebra_backend as kernel
from algebra_backend import Matrix
from nf_errors import NoCoercionError, NumberFieldInputError, StructuralMismatchError
from nf_poly import QQ, Polynomial
from number_field import FieldElement, LatticeNode

_logger = logging.getLogger(__name__)

Exponents = Tuple[int, ...]


class NonSimpleElement(FieldElement):
    __slots__ = ("parent", "terms")

    @classmethod
    def _raw(cls, parent, terms: Dict[Exponents, Fraction]) -> "NonSimpleElement":
        obj = cls.__new__(cls)
        obj.parent = parent
        obj.terms = {e: c for e, c in terms.items() if c}
        return obj

    def __bool__(self) -> bool:
        return bool(self.terms)

    def coordinates(self) -> List[Fraction]:
        return [self.terms.get(m, Fraction(0)) for m in self.parent.monomials]

    def _add(self, o: "NonSimpleElement") -> "NonSimpleElement":
        out = dict(self.terms)
        for e, c in o.terms.items():
            out[e] = out.get(e, Fraction(0)) + c
        return NonSimpleElement._raw(self.parent, out)

    def _neg(self) -> "NonSimpleElement":
        return NonSimpleElement._raw(self.parent, {e: -c for e, c in self.terms.items()})

    def _mul(self, o: "NonSimpleElement") -> "NonSimpleElement":
        out: Dict[Exponents, Fraction] = {}
        for e1, c1 in self.terms.items():
            for e2, c2 in o.terms.items():
                e = tuple(a + b for a, b in zip(e1, e2))
                out[e] = out.get(e, Fraction(0)) + c1 * c2
        return NonSimpleElement._raw(self.parent, self.parent._reduce(out))

    def _eq(self, o: "NonSimpleElement") -> bool:
        return self.terms == o.terms

    def inverse(self) -> "NonSimpleElement":
        if not self.terms:
            raise ZeroDivisionError("inverse of zero in a number field")
        K = self.parent
        cols = [self._mul(b).coordinates() for b in K.basis()]
        M = Matrix(QQ, [[c[i] for c in cols] for i in range(K.degree)])
        return K.from_vector(M.solve_right(K.one().coordinates()))

    def is_rational(self) -> bool:
        zero = self.parent.monomials[0]
        return all(e == zero for e in self.terms)

    def to_rational(self) -> Fraction:
        if not self.is_rational():
            raise NoCoercionError(f"{self!r} is not rational")
        return self.terms.get(self.parent.monomials[0], Fraction(0))

    def is_integral(self) -> bool:
        return all(c.denominator == 1 for c in self.minpoly().coeffs)

    def __repr__(self) -> str:
        if not self.terms:
            return "0"
        parts = []
        for e in sorted(self.terms, reverse=True):
            c = self.terms[e]
            mono = "*".join(
                v if k == 1 else f"{v}^{k}" for v, k in zip(self.parent.vars, e) if k
            )
            if not mono:
                parts.append(str(c))
            elif c == 1:
                parts.append(mono)
            elif c == -1:
                parts.append(f"-{mono}")
            else:
                parts.append(f"{c}*{mono}")
        out = parts[0]
        for t in parts[1:]:
            out += f" - {t[1:]}" if t.startswith("-") else f" + {t}"
        return out


class NonSimpleNumberField(LatticeNode):
    """Compositum of the simple extensions Q[x]/(fi), presented by generators."""

    is_simple = False

    def __init__(self, pols: Sequence[Polynomial], *, var: str = "a", name: Optional[str] = None,
                 check: bool = True):
        pols = [p if isinstance(p, Polynomial) else Polynomial(QQ, p) for p in pols]
        if not pols:
            raise NumberFieldInputError("a non-simple field needs at least one polynomial")
        for p in pols:
            if p.field is not QQ:
                raise StructuralMismatchError("non-simple fields are built over QQ only")
            if p.degree() < 1:
                raise NumberFieldInputError("defining polynomials must have degree >= 1")
        self.pols = tuple(pols)
        self.base_field = QQ
        self.degrees = tuple(p.degree() for p in pols)
        self.degree = math.prod(self.degrees)
        self.absolute_degree = self.degree
        self.vars = tuple(f"{var}{i + 1}" for i in range(len(pols)))
        self.var = var
        self.monomials: List[Exponents] = list(itertools.product(*(range(d) for d in self.degrees)))
        self._power_cache: Dict[Tuple[int, int], Polynomial] = {}
        self._primitive: Optional[Tuple[NonSimpleElement, Polynomial]] = None
        self._init_node(name)
        if check:
            for p in pols:
                if len(kernel.factor(p)) != 1 or not p.is_squarefree():
                    raise NumberFieldInputError(f"{p!r} is not irreducible over QQ")
            _, f = self.primitive_element()
            if f.degree() != self.degree or len(kernel.factor(f)) != 1:
                raise NumberFieldInputError("the defining polynomials do not define a field")

    def _power_mod(self, i: int, n: int) -> Polynomial:
        key = (i, n)
        r = self._power_cache.get(key)
        if r is None:
            r = (Polynomial.gen(QQ) ** n) % self.pols[i]
            self._power_cache[key] = r
        return r

    def _reduce(self, terms: Dict[Exponents, Fraction]) -> Dict[Exponents, Fraction]:
        for i, d in enumerate(self.degrees):
            out: Dict[Exponents, Fraction] = {}
            for e, c in terms.items():
                if not c:
                    continue
                if e[i] < d:
                    out[e] = out.get(e, Fraction(0)) + c
                    continue
                for k, rc in enumerate(self._power_mod(i, e[i]).coeffs):
                    if rc:
                        e2 = e[:i] + (k,) + e[i + 1:]
                        out[e2] = out.get(e2, Fraction(0)) + c * rc
            terms = out
        return terms

    def __call__(self, x: Any = 0) -> NonSimpleElement:
        if isinstance(x, NonSimpleElement) and x.parent is self:
            return x
        if isinstance(x, dict):
            terms: Dict[Exponents, Fraction] = {}
            for e, c in x.items():
                e = tuple(e)
                if len(e) != len(self.degrees) or any(k < 0 for k in e):
                    raise NumberFieldInputError(f"bad exponent tuple {e!r}")
                terms[e] = terms.get(e, Fraction(0)) + QQ(c)
            return NonSimpleElement._raw(self, self._reduce(terms))
        if isinstance(x, (list, tuple)):
            return self.from_vector(x)
        if isinstance(x, FieldElement):
            from nf_lattice import force_coerce

            return force_coerce(self, x)
        c = QQ(x)
        return NonSimpleElement._raw(self, {self.monomials[0]: c})

    def from_vector(self, v: Sequence[Any]) -> NonSimpleElement:
        if len(v) != self.degree:
            raise NumberFieldInputError(f"expected {self.degree} coordinates, got {len(v)}")
        return NonSimpleElement._raw(self, {m: QQ(c) for m, c in zip(self.monomials, v)})

    def zero(self) -> NonSimpleElement:
        return NonSimpleElement._raw(self, {})

    def one(self) -> NonSimpleElement:
        return NonSimpleElement._raw(self, {self.monomials[0]: Fraction(1)})

    def gen(self, i: int = 0) -> NonSimpleElement:
        e = [0] * len(self.degrees)
        e[i] = 1
        return NonSimpleElement._raw(self, self._reduce({tuple(e): Fraction(1)}))

    def gens(self) -> List[NonSimpleElement]:
        return [self.gen(i) for i in range(len(self.degrees))]

    def basis(self) -> List[NonSimpleElement]:
        return [NonSimpleElement._raw(self, {m: Fraction(1)}) for m in self.monomials]

    def primitive_element(self) -> Tuple[NonSimpleElement, Polynomial]:
        """
        gamma = x1 + t*x2 + t^2*x3 + ... for the first t = 1, 2, ... whose
        minimal polynomial has full degree.
        """
        if self._primitive is not None:
            return self._primitive
        gens = self.gens()
        best: Optional[Tuple[NonSimpleElement, Polynomial]] = None
        for t in range(1, self.degree * self.degree + 2):
            gamma = self.zero()
            for j, g in enumerate(gens):
                gamma = gamma._add(g._mul(self(t ** j)))
            f = gamma.minpoly()
            if f.degree() == self.degree:
                self._primitive = (gamma, f)
                _logger.debug("primitive element found with t=%d", t)
                return self._primitive
            if best is None or f.degree() > best[1].degree():
                best = (gamma, f)
        # only reached when the relations do not define a field
        return best

    def __repr__(self) -> str:
        if self.name:
            return self.name
        pols = ", ".join(p.to_string(v) for p, v in zip(self.pols, self.vars))
        return f"Non-simple number field with defining polynomials [{pols}]"


def non_simple_number_field(pols: Sequence[Any], var: str = "a", *, name: Optional[str] = None,
                            check: bool = True) -> NonSimpleNumberField:
    """Build Q[x1..xr]/(f1..fr) from Polynomials, coefficient lists or strings."""
    converted = []
    for p in pols:
        if isinstance(p, str):
            p = kernel.parse_polynomial(p)
        elif isinstance(p, (list, tuple)):
            p = Polynomial(QQ, p)
        converted.append(p)
    return NonSimpleNumberField(converted, var=var, name=name, check=check)
