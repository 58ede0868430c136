#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Factorization and roots of univariate polynomials over number fields.

Over QQ the numeric kernel factors directly.  Over an absolute simple field
K = Q(a) we use Trager's norm method:

    h squarefree over K, shift k in 0, 1, -1, 2, -2, ...
    N(x) = Norm_{K/Q}( h(x - k*a) )          (a resultant over Q)
    N squarefree  =>  every irreducible factor N_i of N over Q gives the
                      irreducible factor gcd(h(x), N_i(x + k*a)) of h

Relative and non-simple fields are handled through their absolute simple
field (nf_splitting.absolute_simple_field).
"""

from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Optional, Tuple

import algebra_backend as kernel
from nf_errors import NumberFieldInputError
from nf_poly import QQ, Polynomial

_logger = logging.getLogger(__name__)


def squarefree_decomposition(f: Polynomial) -> List[Tuple[Polynomial, int]]:
    """Yun's algorithm: [(g_i, i)] with f = lc * prod g_i^i, g_i monic squarefree and coprime."""
    out: List[Tuple[Polynomial, int]] = []
    if f.degree() < 1:
        return out
    f = f.monic()
    fp = f.derivative()
    a0 = f.gcd(fp)
    b = f // a0
    c = fp // a0
    d = c - b.derivative()
    i = 1
    while b.degree() > 0:
        a = b.gcd(d)
        if a.degree() > 0:
            out.append((a, i))
        b = b // a
        c = d // a
        d = c - b.derivative()
        i += 1
    return out


def _shifts() -> Iterator[int]:
    yield 0
    k = 1
    while True:
        yield k
        yield -k
        k += 1


def _is_absolute_simple(K) -> bool:
    return K.is_simple and K.base_field is QQ


def trager_norm(h: Polynomial) -> Tuple[int, Polynomial]:
    """(k, N) with N = Norm(h(x - k*a)) squarefree over Q; h must be squarefree over K."""
    K = h.field
    rows = [c.as_polynomial() for c in h.coeffs]
    for k in _shifts():
        N = kernel.norm_resultant(K.pol, rows, k)
        if N.is_squarefree():
            if k:
                _logger.debug("norm became squarefree after shift k=%d", k)
            return k, N


def _lift_factor(h: Polynomial, Ni: Polynomial, k: int) -> Polynomial:
    K = h.field
    X = Polynomial.gen(K)
    shifted = Ni.change_ring(K).compose(X + K.gen() * k)
    return h.gcd(shifted)


def _via_absolute(g: Polynomial):
    from nf_splitting import absolute_simple_field

    Ka, to_K, to_Ka = absolute_simple_field(g.field)
    return g.map_coefficients(to_Ka, Ka), to_K


def factor(g: Polynomial) -> Dict[Polynomial, int]:
    """Monic irreducible factors of g over its coefficient field, with multiplicities."""
    K = g.field
    if g.degree() < 1:
        return {}
    if K is QQ:
        return kernel.factor(g)
    if not _is_absolute_simple(K):
        ga, to_K = _via_absolute(g)
        return {h.map_coefficients(to_K, K).monic(): e for h, e in factor(ga).items()}
    out: Dict[Polynomial, int] = {}
    for h, e in squarefree_decomposition(g):
        if h.degree() == 1:
            out[h] = out.get(h, 0) + e
            continue
        k, N = trager_norm(h)
        for Ni in kernel.factor(N):
            piece = _lift_factor(h, Ni, k)
            if piece.degree() > 0:
                out[piece] = out.get(piece, 0) + e
    return out


def roots(g: Polynomial, K=None, *, max_roots: Optional[int] = None, is_normal: bool = False) -> List:
    """
    Roots of g in K (default: the coefficient field of g).

    With ``is_normal=True`` g is assumed irreducible over Q and K normal, so
    either all factors of g over K are linear or none is; the first norm
    factor decides.
    """
    if K is not None and g.field is not K:
        g = g.change_ring(K)
    K = g.field
    if g.degree() < 1:
        return []
    if max_roots is not None and max_roots < 1:
        raise NumberFieldInputError("max_roots must be positive")
    if K is QQ:
        out = [-h.coefficient(0) for h in kernel.factor(g) if h.degree() == 1]
        return out if max_roots is None else out[:max_roots]
    if not _is_absolute_simple(K):
        ga, to_K = _via_absolute(g)
        return [to_K(r) for r in roots(ga, max_roots=max_roots, is_normal=is_normal)]
    m = K.degree
    out = []
    for h, _ in squarefree_decomposition(g):
        if h.degree() == 1:
            out.append(-h.coefficient(0))
        else:
            k, N = trager_norm(h)
            for Ni in kernel.factor(N):
                if Ni.degree() != m:
                    if is_normal:
                        break
                    continue
                piece = _lift_factor(h, Ni, k)
                if piece.degree() == 1:
                    out.append(-piece.monic().coefficient(0))
                if max_roots is not None and len(out) >= max_roots:
                    break
        if max_roots is not None and len(out) >= max_roots:
            return out[:max_roots]
    return out


def is_irreducible(g: Polynomial) -> bool:
    K = g.field
    if g.degree() < 1:
        return False
    if g.degree() == 1:
        return True
    if K is QQ:
        fac = kernel.factor(g)
        return len(fac) == 1 and next(iter(fac.values())) == 1
    if not _is_absolute_simple(K):
        ga, _ = _via_absolute(g)
        return is_irreducible(ga)
    if not g.is_squarefree():
        return False
    _, N = trager_norm(g.monic())
    fac = kernel.factor(N)
    return len(fac) == 1
