#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
================================================================================
The embedding lattice: registration, chain search, coercion, common superfields
================================================================================

Graph model (nodes are fields, identified by ``uid``):

    C.lattice.subs    : [f : D -> C, ...]      strong, insertion ordered
    D.lattice.sub_of  : [weakref(C), ...]      weak, pruned lazily
    relative L / K    : implicit edge K -> L (base inclusion) plus weakref(L)
                        in K.lattice.sub_of

Search primitives (find_one_chain, find_all_super, common_super) report
absence as a value (None).  Only the public coercion entry points
(force_coerce, force_op) turn absence into an exception, each with a
non-throwing variant (``throw_error=False``).

Chain search pops the frontier LIFO and keeps the first chain discovered for
each field: deterministic for a fixed registry state, not a shortest path.
================================================================================
"""

from __future__ import annotations

import logging
import math
import weakref
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from nf_errors import (
    ConflictingEmbeddingError,
    NoCoercionError,
    NoCommonSuperfieldError,
    NumberFieldInputError,
    StructuralMismatchError,
)
from nf_morphism import BaseInclusion, NumberFieldMorphism, generators
from nf_poly import QQ, Polynomial, interpolate, parent_of

_logger = logging.getLogger(__name__)


# =============================================================================
# Section 0: chain search
# =============================================================================


def _links_below(K) -> Iterator[Tuple[Any, Any]]:
    """(subfield, morphism into K) one step below K: registered subs, then the base inclusion."""
    for f in K.lattice.subs:
        yield f.domain, f
    b = K.base_field
    if b is not None and b is not QQ:
        yield b, BaseInclusion(b, K)


def _search(a, target=None, accept: Optional[Callable[[Any], bool]] = None) -> Dict[int, Tuple[Any, List[Any]]]:
    chains: Dict[int, Tuple[Any, List[Any]]] = {a.uid: (a, [])}
    frontier: List[Any] = []
    for d, f in _links_below(a):
        if d.uid in chains or (accept is not None and not accept(d)):
            continue
        chains[d.uid] = (d, [f])
        frontier.append(d)
    if target is not None and target.uid in chains:
        return chains
    expanded = {a.uid}
    while frontier:
        k = frontier.pop()
        if k.uid in expanded:
            continue
        expanded.add(k.uid)
        for d, f in _links_below(k):
            if d.uid in chains or (accept is not None and not accept(d)):
                continue
            chains[d.uid] = (d, [f] + chains[k.uid][1])
            if target is not None and d.uid == target.uid:
                return chains
            frontier.append(d)
    return chains


def find_one_chain(t, a) -> Optional[List[Any]]:
    """Morphisms whose composition (applied left to right) sends T into A, or None."""
    if t is a:
        return []
    hit = _search(a, target=t).get(t.uid)
    return None if hit is None else hit[1]


def collect_all_chains(a, accept: Optional[Callable[[Any], bool]] = None) -> Dict[int, Tuple[Any, List[Any]]]:
    """uid -> (subfield, chain into A) for every subfield reachable from A (A excluded)."""
    chains = _search(a, accept=accept)
    chains.pop(a.uid, None)
    return chains


def apply_chain(chain: List[Any], x: Any):
    for f in chain:
        if parent_of(x) is not f.domain:
            raise StructuralMismatchError(f"chain broken: {x!r} is not in the domain {f.domain!r}")
        x = f(x)
    return x


# =============================================================================
# Section 1: registration
# =============================================================================


def embed(f: NumberFieldMorphism) -> None:
    """Permanently register ``f : D -> C`` as the canonical embedding of D into C."""
    D, C = f.domain, f.codomain
    if D is C:
        return
    if C.absolute_degree % D.absolute_degree:
        raise NumberFieldInputError(
            f"cannot embed a degree-{D.absolute_degree} field into a degree-{C.absolute_degree} field"
        )
    existing = find_one_chain(D, C)
    if existing is not None:
        for g in generators(D):
            if apply_chain(existing, g) != f(g):
                raise ConflictingEmbeddingError(f"a different embedding of {D!r} into {C!r} is already installed")
        if any(h is f or h == f for h in C.lattice.subs):
            _logger.debug("embedding %d -> %d already registered", D.uid, C.uid)
            return
    if D.absolute_degree == C.absolute_degree and find_one_chain(C, D) is not None:
        raise ConflictingEmbeddingError(f"registering {D.uid} -> {C.uid} would close a cycle in the lattice")
    C.lattice.subs.append(f)
    D.lattice.sub_of.append(weakref.ref(C))
    _logger.debug("registered embedding %d -> %d (degrees %d -> %d)", D.uid, C.uid, D.absolute_degree, C.absolute_degree)


def has_embedding(F, G) -> bool:
    """Is an embedding F -> G already known?"""
    if F is G:
        return True
    if G.absolute_degree % F.absolute_degree:
        return False
    return find_one_chain(F, G) is not None


# =============================================================================
# Section 2: coercion
# =============================================================================


def force_coerce(a, b: Any, throw_error: bool = True):
    """
    Image of ``b`` in the field ``a``.

    Failure raises NoCoercionError, or returns None with ``throw_error=False``.
    """
    pb = parent_of(b)
    if pb is a:
        return b
    if pb is QQ:
        return a(b)
    if a is QQ:
        if b.is_rational():
            return b.to_rational()
    elif a.cyclotomic_order is not None and pb.cyclotomic_order is not None:
        return force_coerce_cyclo(a, b, throw_error)
    elif pb.absolute_degree <= a.absolute_degree:
        chain = find_one_chain(pb, a)
        if chain is not None:
            return apply_chain(chain, b)
    if b.is_rational():
        return a(b.to_rational())
    if throw_error:
        raise NoCoercionError(f"no coercion of {b!r} from {pb!r} into {a!r} is known")
    return None


def embedding(k, K) -> NumberFieldMorphism:
    """The morphism k -> K induced by the lattice (k must be known to embed into K)."""
    gens = [k.gen()] if k.is_simple else k.gens()
    return NumberFieldMorphism(k, K, [force_coerce(K, g) for g in gens])


def force_coerce_cyclo(a, b: Any, throw_error: bool = True):
    """
    Move ``b`` from Q(z_fb) into Q(z_fa).

    b lies in Q(z_g), g = gcd(fa, fb), exactly when its conjugates only
    depend on the exponent class mod g; one representative exponent per
    class is interpolated, the coefficients must be rational and the result
    must reproduce b.  The way up from g to fa is x -> x^(fa/g).
    """
    B = parent_of(b)
    if not b:
        return a.zero()
    fa, fb = a.cyclotomic_order, B.cyclotomic_order
    g = math.gcd(fa, fb)
    if g <= 2:
        if b.is_rational():
            return a(b.to_rational())
        if throw_error:
            raise NoCoercionError(f"{b!r} is not rational, it cannot live in a cyclotomic field of order {fa}")
        return None
    q = b.as_polynomial()
    if g < fb:
        zb = B.gen()
        step = fb // g
        xs, ys = [], []
        for r in range(1, g):
            if math.gcd(r, g) != 1:
                continue
            j = r
            while math.gcd(j, fb) != 1:
                j += g
            xs.append(zb ** (step * r))
            ys.append(q(zb ** j))
        p = interpolate(B, xs, ys)
        if not all(c.is_rational() for c in p.coeffs):
            if throw_error:
                raise NoCoercionError(f"{b!r} is not fixed by the Galois group of Q(z_{fb})/Q(z_{g})")
            return None
        q = Polynomial(QQ, [c.to_rational() for c in p.coeffs])
        if q(zb ** step) != b:
            if throw_error:
                raise NoCoercionError(f"{b!r} does not lie in Q(z_{g})")
            return None
    if g < fa:
        X = Polynomial.gen(QQ)
        q = q.compose(X ** (fa // g))
    return a(q)


# =============================================================================
# Section 3: common superfields
# =============================================================================


def find_all_super(A, accept: Optional[Callable[[Any], bool]] = None) -> List[Any]:
    """A together with every live field reachable through ``sub_of`` links (discovery order)."""
    seen = {A.uid}
    order = [A]
    stack = [A]
    while stack:
        k = stack.pop()
        for s in k.lattice.live_superfields():
            if s.uid in seen:
                continue
            seen.add(s.uid)
            if accept is not None and not accept(s):
                continue
            order.append(s)
            stack.append(s)
    return order


def common_super(A, B):
    """Smallest known field into which both A and B embed, or None."""
    if A is B:
        return A
    if A is QQ:
        return B
    if B is QQ:
        return A
    if A.cyclotomic_order is not None and B.cyclotomic_order is not None:
        from number_field import cyclotomic_field

        return cyclotomic_field(A.cyclotomic_order * B.cyclotomic_order // math.gcd(A.cyclotomic_order, B.cyclotomic_order))
    above_b = {s.uid for s in find_all_super(B)}
    best = None
    for s in find_all_super(A):
        if s.uid in above_b and (best is None or s.absolute_degree < best.absolute_degree):
            best = s
    return best


def common_super_elements(a: Any, b: Any) -> Tuple[Any, Any]:
    """(a, b) moved into their common superfield, or (None, None)."""
    C = common_super(parent_of(a), parent_of(b))
    if C is None:
        return None, None
    return C(a), C(b)


def force_op(op: Callable[..., Any], *elements: Any, throw_error: bool = True):
    """Apply ``op`` after moving every operand into one common superfield."""
    if not elements:
        raise NumberFieldInputError("force_op needs at least one operand")
    C = parent_of(elements[0])
    for x in elements[1:]:
        C = common_super(parent_of(x), C)
        if C is None:
            if throw_error:
                raise NoCommonSuperfieldError(
                    f"no common superfield known for the operands {', '.join(repr(e) for e in elements)}"
                )
            return None
    if C is QQ:
        return op(*[QQ(x) for x in elements])
    moved = []
    for x in elements:
        y = force_coerce(C, x, throw_error)
        if y is None:
            return None
        moved.append(y)
    return op(*moved)
