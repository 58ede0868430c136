#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Subfield, isomorphism, compositum and linear-disjointness tests.

Predicates answer with ``(flag, morphism)``: on a negative answer the
morphism is the dummy zero map built with ``hom(..., check=False)``.

Cheap screens come first:
  - degree divisibility
  - factor shapes of the defining polynomials modulo good primes (a prime is
    good when both reductions keep their degree and stay squarefree)
and only then the exact root search over the larger field.
"""

from __future__ import annotations

import logging
import math
from functools import reduce
from typing import Any, Optional, Tuple

import algebra_backend as kernel
from nf_config import SubfieldTestConfig
from nf_errors import StructuralMismatchError
from nf_factor import factor, is_irreducible, roots
from nf_lattice import embed
from nf_morphism import NumberFieldMorphism, hom, identity_morphism
from nf_poly import QQ
from nf_splitting import collapse_top_layer
from number_field import NumberField, signature

_logger = logging.getLogger(__name__)


def _require_absolute(*fields: Any) -> None:
    for K in fields:
        if not (K.is_simple and K.base_field is QQ):
            raise StructuralMismatchError(f"{K!r} is not an absolute simple field")


def _zero_morphism(K, L) -> NumberFieldMorphism:
    return hom(K, L, L.zero(), check=False)


def _lcm_of_shape(shape) -> int:
    return reduce(lambda a, b: a * b // math.gcd(a, b), shape.keys(), 1)


def _first_checks(K, L, cfg: SubfieldTestConfig) -> bool:
    f, g = K.pol, L.pol
    if g.degree() % f.degree():
        return False
    wanted = cfg.primes_per_degree * K.degree
    p = kernel.next_prime(cfg.first_prime - 1)
    tested = 0
    while tested < wanted:
        if kernel.has_good_reduction(f, p) and kernel.has_good_reduction(g, p):
            tested += 1
            fs = kernel.factor_shape_mod_p(f, p)
            gs = kernel.factor_shape_mod_p(g, p)
            if _lcm_of_shape(gs) % _lcm_of_shape(fs):
                _logger.debug("prime %d rules out an embedding %d -> %d", p, K.uid, L.uid)
                return False
        p = kernel.next_prime(p)
    return True


def _root_image(K, L, *, is_normal: bool = False):
    r = roots(K.pol.change_ring(L), max_roots=1, is_normal=is_normal)
    return r[0] if r else None


def issubfield(K, L, config: Optional[SubfieldTestConfig] = None) -> Tuple[bool, NumberFieldMorphism]:
    """Does K embed into L?  Returns (flag, K -> L)."""
    _require_absolute(K, L)
    cfg = config or SubfieldTestConfig()
    if not _first_checks(K, L, cfg):
        return False, _zero_morphism(K, L)
    img = _root_image(K, L)
    if img is None:
        return False, _zero_morphism(K, L)
    return True, hom(K, L, img, check=False)


def issubfield_normal(K, L, config: Optional[SubfieldTestConfig] = None) -> Tuple[bool, NumberFieldMorphism]:
    """issubfield for a normal K (not checked): one linear factor decides."""
    _require_absolute(K, L)
    cfg = config or SubfieldTestConfig()
    if not _first_checks(K, L, cfg):
        return False, _zero_morphism(K, L)
    img = _root_image(K, L, is_normal=True)
    if img is None:
        return False, _zero_morphism(K, L)
    return True, hom(K, L, img, check=False)


def _has_square_ratio(t) -> bool:
    return t > 0 and kernel.is_square(t.numerator) and kernel.is_square(t.denominator)


def isisomorphic(K, L, config: Optional[SubfieldTestConfig] = None) -> Tuple[bool, NumberFieldMorphism]:
    """Are K and L isomorphic?  Returns (flag, K -> L)."""
    _require_absolute(K, L)
    cfg = config or SubfieldTestConfig()
    f, g = K.pol, L.pol
    if f.degree() != g.degree():
        return False, _zero_morphism(K, L)
    if f.coeffs == g.coeffs:
        return True, hom(K, L, L.gen())
    if signature(K) != signature(L):
        return False, _zero_morphism(K, L)
    if not _has_square_ratio(kernel.discriminant(f) / kernel.discriminant(g)):
        return False, _zero_morphism(K, L)
    p = cfg.iso_prime_floor
    tested = 0
    wanted = max(cfg.iso_min_primes, 2 * K.degree)
    while tested < wanted:
        p = kernel.next_prime(p)
        if not (kernel.has_good_reduction(f, p) and kernel.has_good_reduction(g, p)):
            continue
        tested += 1
        if kernel.factor_shape_mod_p(f, p) != kernel.factor_shape_mod_p(g, p):
            _logger.debug("factor shapes differ modulo %d", p)
            return False, _zero_morphism(K, L)
    img = _root_image(K, L)
    if img is None:
        return False, _zero_morphism(K, L)
    return True, hom(K, L, img, check=False)


def compositum(K, L) -> Tuple[NumberField, NumberFieldMorphism, NumberFieldMorphism]:
    """
    Compositum C of K and L, assuming L normal (not checked).

    Returns (C, K -> C, L -> C); both embeddings are registered.
    """
    _require_absolute(K, L)
    lf = list(factor(K.pol.change_ring(L)))
    d = lf[0].degree()
    if any(h.degree() != d for h in lf):
        raise StructuralMismatchError("the second field cannot be normal")
    if d == 1:
        mK = hom(K, L, -lf[0].coefficient(0))
        embed(mK)
        return L, mK, identity_morphism(L)
    KK = NumberField(lf[0], L, check=False)
    ct = collapse_top_layer(KK)
    C = ct.field
    mK = hom(K, C, ct.from_tower(KK.gen()), check=False)
    mL = ct.base_embedding
    embed(mK)
    embed(mL)
    return C, mK, mL


def is_linearly_disjoint(K1, K2) -> bool:
    """Are K1 and K2 linearly disjoint over Q?"""
    _require_absolute(K1, K2)
    if math.gcd(K1.degree, K2.degree) == 1:
        return True
    d1 = kernel.discriminant(K1.pol).numerator
    d2 = kernel.discriminant(K2.pol).numerator
    if math.gcd(d1, d2) == 1:
        return True
    return is_irreducible(K1.pol.change_ring(K2))
