#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
================================================================================
Splitting fields, tower collapse and absolute simple fields (分裂域构造)
================================================================================

Splitting-field loop (one adjunction per step):

    1. coprime base of the inputs (first pass only, unless coprime=True)
    2. factor every pending polynomial over the current field K
    3. no factor of degree > 1 left            -> done
    4. adjoin a root of the first big factor   -> L = K(b)
    5. collapse L/K/Q into Ks = Q(b + k*a)     -> register K -> Ks
    6. pending := (big factor / (x - b)), other big factors, all mapped to Ks

Every adjunction removes one linear factor from the unsplit part, so the loop
stops after at most (total input degree) steps; the step cap enforces this.

Red-lines:
  - the result is a splitting field, not necessarily a minimal one when the
    input factors interact
  - every collapse embedding is registered with nf_lattice.embed
================================================================================
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple, Union

from algebra_backend import Matrix
from nf_config import SplittingFieldConfig
from nf_errors import NumberFieldError, NumericKernelError, StructuralMismatchError
from nf_factor import factor, trager_norm
from nf_lattice import embed
from nf_morphism import NumberFieldMorphism, hom, identity_morphism
from nf_poly import QQ, Polynomial, coprime_base
from number_field import NumberField

_logger = logging.getLogger(__name__)


# =============================================================================
# Section 0: collapsing a two-level tower
# =============================================================================


@dataclass
class TowerCollapse:
    """
    L = K(b) rewritten as the absolute simple field Ks = Q(b + k*a).

      - to_tower:       Ks -> L
      - from_tower:     L  -> Ks  (base map = base_embedding)
      - base_embedding: K  -> Ks
    """

    field: NumberField
    to_tower: NumberFieldMorphism
    from_tower: NumberFieldMorphism
    base_embedding: NumberFieldMorphism
    shift: int = 0


def collapse_top_layer(L, *, var: str = "a") -> TowerCollapse:
    """Absolute simple field of a relative simple L whose base K is absolute."""
    K = L.base_field
    if not L.is_simple or K is QQ:
        raise StructuralMismatchError(f"{L!r} is not a relative simple extension")
    if not (K.is_simple and K.base_field is QQ):
        raise StructuralMismatchError("the base of the top layer must be an absolute simple field")

    k, N = trager_norm(L.pol)
    Ks = NumberField(N.monic(), QQ, var=var, check=False)
    gamma = Ks.gen()

    # a in Ks: the common root of m(y) and g(gamma - k*y)
    lin = Polynomial(Ks, [gamma, -k])
    G = Polynomial(Ks, [])
    for j, c in enumerate(L.pol.coeffs):
        if c:
            G = G + c.as_polynomial().change_ring(Ks) * lin ** j
    h = K.pol.change_ring(Ks).gcd(G)
    if h.degree() != 1:
        raise NumericKernelError(f"tower collapse failed: gcd of degree {h.degree()} instead of 1")
    a_s = -h.coefficient(0)
    b_s = gamma - a_s * k

    mk = NumberFieldMorphism(K, Ks, [a_s])
    from_tower = NumberFieldMorphism(L, Ks, [b_s], base_map=mk)
    to_tower = NumberFieldMorphism(Ks, L, [L.gen() + L(K.gen()) * k])
    _logger.debug("collapsed degree-%d tower with shift k=%d", Ks.degree, k)
    return TowerCollapse(Ks, to_tower, from_tower, mk, k)


def absolute_simple_field(K) -> Tuple[Any, NumberFieldMorphism, NumberFieldMorphism]:
    """(Ka, Ka -> K, K -> Ka) with Ka absolute simple; cached on K."""
    if K._absolute is not None:
        return K._absolute
    if K.is_simple and K.base_field is QQ:
        ident = identity_morphism(K)
        result = (K, ident, ident)
    elif K.is_simple:
        M = K.base_field
        Ma, to_M, to_Ma = absolute_simple_field(M)
        if Ma is M:
            ct = collapse_top_layer(K)
            result = (ct.field, ct.to_tower, ct.from_tower)
        else:
            L = NumberField(K.pol.map_coefficients(to_Ma, Ma), Ma, var=K.var, check=False)
            ct = collapse_top_layer(L)
            L_to_K = NumberFieldMorphism(L, K, [K.gen()], base_map=lambda c: K(to_M(c)))
            K_to_L = NumberFieldMorphism(K, L, [L.gen()], base_map=lambda c: L(to_Ma(c)))
            result = (ct.field, ct.to_tower.compose(L_to_K), K_to_L.compose(ct.from_tower))
    else:
        gamma, f = K.primitive_element()
        Ka = NumberField(f, QQ, var="a", check=False)
        powers = [K.one()]
        for _ in range(K.degree - 1):
            powers.append(powers[-1] * gamma)
        A = Matrix(QQ, [[p.coordinates()[i] for p in powers] for i in range(K.degree)])
        images = [Ka(A.solve_right(g.coordinates())) for g in K.gens()]
        result = (Ka, NumberFieldMorphism(Ka, K, [gamma]), NumberFieldMorphism(K, Ka, images))
    K._absolute = result
    return result


# =============================================================================
# Section 1: splitting fields
# =============================================================================


def _linear_root(h: Polynomial):
    return -h.coefficient(0) / h.leading_coefficient()


def splitting_field(polys: Union[Polynomial, Sequence[Polynomial]], base=None, *, coprime: bool = False,
                    do_roots: bool = False, config: Optional[SplittingFieldConfig] = None):
    """
    Field in which every polynomial of ``polys`` splits into linear factors.

    Returns the field, or ``(field, roots)`` with ``do_roots=True``.  The
    polynomials may be over QQ or over ``base``; a relative or non-simple
    base is replaced by its absolute simple field (isomorphism registered).
    """
    cfg = config or SplittingFieldConfig()
    if isinstance(polys, Polynomial):
        polys = [polys]
    polys = list(polys)
    if not polys:
        raise StructuralMismatchError("splitting_field needs at least one polynomial")
    if base is None:
        fields = {id(p.field): p.field for p in polys if p.field is not QQ}
        if len(fields) > 1:
            raise StructuralMismatchError("polynomials over different fields need an explicit base")
        base = next(iter(fields.values())) if fields else QQ

    K = base
    if K is not QQ and not (K.is_simple and K.base_field is QQ):
        Ka, _, to_Ka = absolute_simple_field(K)
        embed(to_Ka)
        polys = [p.map_coefficients(to_Ka, Ka) if p.field is K else p for p in polys]
        K = Ka
    pending = [p if p.field is K else p.change_ring(K) for p in polys]
    cap = cfg.max_steps if cfg.max_steps is not None else sum(max(p.degree(), 0) for p in pending)
    if not coprime:
        pending = coprime_base(pending)

    roots: List[Any] = []
    steps = 0
    while True:
        big: List[Polynomial] = []
        for p in pending:
            for h in factor(p):
                if h.degree() == 1:
                    if do_roots:
                        roots.append(_linear_root(h))
                elif h.degree() > 1:
                    big.append(h)
        if not big:
            _logger.info("splitting field of absolute degree %d after %d adjunction(s)",
                         K.absolute_degree, steps)
            return (K, roots) if do_roots else K

        steps += 1
        if steps > cap:
            raise NumberFieldError(f"splitting field did not stabilise within {cap} adjunctions")
        h = big[0]
        if K is QQ:
            Knew = NumberField(h, QQ, check=False)
            mapper = Knew
            new_root = Knew.gen()
        else:
            L = NumberField(h, K, check=False)
            ct = collapse_top_layer(L)
            embed(ct.base_embedding)
            Knew = ct.field
            mapper = ct.base_embedding
            new_root = ct.from_tower(L.gen())
        _logger.debug("adjoined a root of a degree-%d factor: absolute degree %d -> %d",
                      h.degree(), K.absolute_degree, Knew.absolute_degree)

        X = Polynomial.gen(Knew)
        rest = h.map_coefficients(mapper, Knew).exact_div(X - new_root)
        pending = [rest] + [b.map_coefficients(mapper, Knew) for b in big[1:]]
        if do_roots:
            roots = [mapper(r) for r in roots] + [new_root]
        K = Knew


def normal_closure(K) -> Tuple[Any, NumberFieldMorphism]:
    """Splitting field S of K's defining polynomial and an embedding K -> S (not registered)."""
    Ka, _, to_Ka = absolute_simple_field(K)
    if Ka.degree == 1:
        return K, identity_morphism(K)
    S, rts = splitting_field(Ka.pol, do_roots=True)
    f = hom(Ka, S, rts[0], check=False)
    return S, (to_Ka.compose(f) if Ka is not K else f)
