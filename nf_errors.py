#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Strict error model for the number-field lattice (严格错误模型).

Red-lines:
  - No silent fallback: a failed coercion, a conflicting registration or a
    kernel failure is always surfaced to the immediate caller.
  - Searches report absence as a value (None / False); only the public
    entry points turn absence into one of the exceptions below.
"""

from __future__ import annotations


class NumberFieldError(RuntimeError):
    """Base error of the number-field layer."""


class NumberFieldInputError(NumberFieldError):
    """Malformed input: wrong type, float contamination, bad degree."""


class StructuralMismatchError(NumberFieldError):
    """An object does not have the structure an operation requires."""


class NoCoercionError(NumberFieldError):
    """An element cannot currently be expressed in the requested field."""


class ConflictingEmbeddingError(NumberFieldError):
    """A registration disagrees with an embedding that is already known."""


class NoCommonSuperfieldError(NumberFieldError):
    """Two fields have no currently known common superfield."""


class NumericKernelError(NumberFieldError):
    """Failure inside the external numeric kernel (sympy / numpy)."""
