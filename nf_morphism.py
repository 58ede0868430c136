#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Field homomorphisms given by generator images.

A morphism D -> C is determined by
  - the image of the generator of D (simple D), or of every generator (non-simple D)
  - how the base field of D is mapped (relative D); by default the canonical
    coercion ``C(c)`` is used, an explicit ``base_map`` overrides it

Red-lines:
  - application asserts that the argument lives in the domain
  - ``hom(..., check=True)`` verifies that the images are roots of the
    defining polynomial(s); ``check=False`` is reserved for the dummy zero
    morphisms returned by failed predicates
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional

from nf_errors import NumberFieldInputError, StructuralMismatchError
from nf_poly import QQ, parent_of

_logger = logging.getLogger(__name__)


class NumberFieldMorphism:
    """Homomorphism ``domain -> codomain`` of number fields."""

    def __init__(self, domain, codomain, images: Any, base_map: Optional[Callable[[Any], Any]] = None):
        if not isinstance(images, (list, tuple)):
            images = [images]
        expected = 1 if domain.is_simple else len(domain.pols)
        if len(images) != expected:
            raise NumberFieldInputError(
                f"a morphism from {domain!r} needs {expected} generator image(s), got {len(images)}"
            )
        self.domain = domain
        self.codomain = codomain
        self.images = tuple(codomain(x) for x in images)
        self.base_map = base_map

    @property
    def image(self):
        """Image of the (first) generator."""
        return self.images[0]

    def _map_base(self, c: Any):
        if self.base_map is not None:
            return self.codomain(self.base_map(c))
        return self.codomain(c)

    def __call__(self, x: Any):
        p = parent_of(x)
        if p is QQ:
            return self.codomain(x)
        if p is not self.domain:
            raise StructuralMismatchError(f"{x!r} does not belong to the domain {self.domain!r}")
        C = self.codomain
        if not self.domain.is_simple:
            acc = C.zero()
            for exps, c in x.terms.items():
                term = C(c)
                for img, e in zip(self.images, exps):
                    if e:
                        term = term * img ** e
                acc = acc + term
            return acc
        if not x.coeffs:
            return C.zero()
        img = self.images[0]
        acc = self._map_base(x.coeffs[-1])
        for c in reversed(x.coeffs[:-1]):
            acc = acc * img + self._map_base(c)
        return acc

    def compose(self, other: "NumberFieldMorphism") -> "NumberFieldMorphism":
        """``other ∘ self``: first self, then other."""
        if other.domain is not self.codomain:
            raise StructuralMismatchError("morphisms are not composable")
        base_map = None
        if self.domain.is_simple and self.domain.base_field is not QQ:
            base_map = lambda c, f=self, g=other: g(f._map_base(c))
        return NumberFieldMorphism(
            self.domain, other.codomain, [other(y) for y in self.images], base_map=base_map
        )

    def _base_images(self) -> List[Any]:
        return [self(y) for y in generators(self.domain)[len(self.images):]]

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, NumberFieldMorphism):
            return NotImplemented
        if self.domain is not other.domain or self.codomain is not other.codomain:
            return False
        return self.images == other.images and self._base_images() == other._base_images()

    __hash__ = None

    def __repr__(self) -> str:
        imgs = ", ".join(repr(y) for y in self.images)
        return f"Morphism {self.domain!r} -> {self.codomain!r} sending generator(s) to [{imgs}]"


class BaseInclusion(NumberFieldMorphism):
    """Canonical inclusion of the base field of a relative extension."""

    def __init__(self, base, ext):
        if ext.base_field is not base:
            raise StructuralMismatchError(f"{base!r} is not the base field of {ext!r}")
        super().__init__(base, ext, [ext(g) for g in _generators(base)])

    def __call__(self, x: Any):
        p = parent_of(x)
        if p is not QQ and p is not self.domain:
            raise StructuralMismatchError(f"{x!r} does not belong to the domain {self.domain!r}")
        return self.codomain(x)


def _generators(K) -> List[Any]:
    if K.is_simple:
        return [K.gen()]
    return list(K.gens())


def hom(domain, codomain, images: Any, *, base_map: Optional[Callable[[Any], Any]] = None, check: bool = True):
    """Build the morphism sending the generator(s) of ``domain`` to ``images``."""
    f = NumberFieldMorphism(domain, codomain, images, base_map=base_map)
    if not check:
        return f
    if domain.is_simple:
        pol = domain.pol
        img = f.images[0]
        value = codomain.zero()
        for c in reversed(pol.coeffs):
            value = value * img + f._map_base(c)
        if value:
            raise StructuralMismatchError("data does not define a morphism: image is not a root")
    else:
        for pol, img in zip(domain.pols, f.images):
            if pol(img):
                raise StructuralMismatchError("data does not define a morphism: image is not a root")
    return f


def identity_morphism(K) -> NumberFieldMorphism:
    return NumberFieldMorphism(K, K, _generators(K))


def generators(K) -> List[Any]:
    """Generator(s) of K followed by the generators of its base chain, all as elements of K."""
    out = [x for x in _generators(K)]
    k = K.base_field if K.is_simple else QQ
    while k is not QQ:
        out.append(K(k.gen()))
        k = k.base_field
    return out
