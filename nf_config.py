#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Run configuration for the number-field layer (运行配置).

Red-lines:
  - configs are frozen dataclasses validated in ``__post_init__``
  - floating tolerances are derived from machine precision (numpy finfo),
    never typed in by hand
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from nf_errors import NumberFieldInputError


def _machine_tolerance() -> float:
    # eps^(1/4): headroom for the conditioning of companion-matrix roots
    return float(np.finfo(np.float64).eps) ** 0.25


@dataclass(frozen=True)
class SubfieldTestConfig:
    """
    Prime screens used before a subfield / isomorphism root search.

      - first_prime: smallest prime tried by the subfield screen
      - primes_per_degree: good primes tested per unit of [K:Q]
      - iso_prime_floor: isomorphism screen starts above this bound
      - iso_min_primes: lower bound on the number of isomorphism-screen primes
    """

    first_prime: int = 3
    primes_per_degree: int = 10
    iso_prime_floor: int = 10 ** 5
    iso_min_primes: int = 20

    def __post_init__(self) -> None:
        if not isinstance(self.first_prime, int) or self.first_prime < 2:
            raise NumberFieldInputError(f"first_prime must be int >= 2, got {self.first_prime!r}")
        if not isinstance(self.primes_per_degree, int) or self.primes_per_degree < 0:
            raise NumberFieldInputError(f"primes_per_degree must be int >= 0, got {self.primes_per_degree!r}")
        if not isinstance(self.iso_prime_floor, int) or self.iso_prime_floor < 2:
            raise NumberFieldInputError(f"iso_prime_floor must be int >= 2, got {self.iso_prime_floor!r}")
        if not isinstance(self.iso_min_primes, int) or self.iso_min_primes < 0:
            raise NumberFieldInputError(f"iso_min_primes must be int >= 0, got {self.iso_min_primes!r}")


@dataclass(frozen=True)
class SplittingFieldConfig:
    """``max_steps=None``: cap adjunctions at the total degree of the input."""

    max_steps: Optional[int] = None

    def __post_init__(self) -> None:
        if self.max_steps is not None and (not isinstance(self.max_steps, int) or self.max_steps < 0):
            raise NumberFieldInputError(f"max_steps must be None or int >= 0, got {self.max_steps!r}")


@dataclass(frozen=True)
class TorsionConfig:
    """Slack added to |conjugate| <= 1 in the floating torsion screen."""

    tolerance: float = _machine_tolerance()

    def __post_init__(self) -> None:
        if not isinstance(self.tolerance, float) or not (0.0 < self.tolerance < 1.0):
            raise NumberFieldInputError(f"tolerance must be a float in (0, 1), got {self.tolerance!r}")


def configure_logging(level: int = logging.INFO) -> None:
    """Install a default handler only when the host application has none."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(
            level=level,
            format="[%(levelname)s] %(name)s: %(message)s",
        )
    root.setLevel(level)
