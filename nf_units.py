#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Torsion units and normal basis generators.

Torsion test:
  1. optional unit check: integral with absolute norm +-1
  2. floating screen: every complex conjugate must satisfy |x_i| <= 1 + tol
     (numpy companion-matrix roots; tol from machine precision)
  3. exact confirmation: x^M == 1, M = lcm{ n : phi(n) divides [K:Q] }

Normal basis: for normal K with a nice defining polynomial f, a prime q >= [K:Q]
that is totally split in K and coprime to disc(f) gives the generator
K( f / (first factor of f mod q) ), the lift of an idempotent of O/qO.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from typing import Any, Optional

import numpy as np

import algebra_backend as kernel
from nf_config import TorsionConfig
from nf_errors import NumberFieldInputError, StructuralMismatchError
from nf_poly import QQ
from number_field import is_defining_polynomial_nice

_logger = logging.getLogger(__name__)


def _absolute_image(x: Any):
    K = x.parent
    if K.is_simple and K.base_field is QQ:
        return x
    from nf_splitting import absolute_simple_field

    return absolute_simple_field(K)[2](x)


def _is_unit(x: Any) -> bool:
    if not x:
        return False
    return x.is_integral() and abs(x.absolute_norm()) == 1


def _torsion_exponent(d: int) -> int:
    """lcm of every n with phi(n) | d; phi(n) >= sqrt(n/2) bounds n by 2*d^2."""
    m = 1
    for n in range(1, 2 * d * d + 3):
        if d % kernel.totient(n) == 0:
            m = m * n // math.gcd(m, n)
    return m


def is_torsion_unit(x: Any, check_is_unit: bool = False, config: Optional[TorsionConfig] = None) -> bool:
    """Is x a root of unity?"""
    cfg = config or TorsionConfig()
    if check_is_unit and not _is_unit(x):
        return False
    if not x:
        return False
    if x.is_rational():
        return abs(x.to_rational()) == 1
    xa = _absolute_image(x)
    Ka = xa.parent
    conj = kernel.evaluate_at(xa.as_polynomial(), kernel.complex_roots(Ka.pol))
    if np.any(np.abs(conj) > 1.0 + cfg.tolerance):
        _logger.debug("a conjugate of modulus %.6g rules out torsion", float(np.max(np.abs(conj))))
        return False
    return xa ** _torsion_exponent(Ka.degree) == 1


def torsion_unit_order(x: Any, n: int) -> int:
    """Order of the torsion unit x, given a multiple n of that order."""
    if not isinstance(n, int) or n < 1:
        raise NumberFieldInputError(f"n must be an int >= 1, got {n!r}")
    order = 1
    for p, v in kernel.factor_integer(n).items():
        s = x ** (n // p ** v)
        steps = 0
        while s != 1:
            if steps == v:
                raise NumberFieldInputError(f"the order of {x!r} does not divide {n}")
            s = s ** p
            order *= p
            steps += 1
    return order


def normal_basis(K) -> Any:
    """An element whose conjugates form a basis of K/Q (K normal, not checked)."""
    if not (K.is_simple and K.base_field is QQ):
        raise StructuralMismatchError(f"{K!r} is not an absolute simple field")
    if not is_defining_polynomial_nice(K):
        raise StructuralMismatchError("normal_basis needs a monic integral defining polynomial")
    f = K.pol
    n = K.degree
    disc = kernel.discriminant(f).numerator
    split = Counter({1: n})
    q = kernel.next_prime(n - 1)
    while disc % q == 0 or kernel.factor_shape_mod_p(f, q) != split:
        q = kernel.next_prime(q)
    _logger.debug("normal basis: totally split prime %d", q)
    return K(kernel.cofactor_mod_p(f, q))
