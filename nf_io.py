#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Plain-text element lists.

Layout (whitespace separated integers, one record per line):

    # optional comment lines
    c_0*d c_1*d ... c_n*d d          defining polynomial, d = common denominator
    e_0*d e_1*d ... e_{n-1}*d d      one line per element (power basis)
"""

from __future__ import annotations

import io
import logging
import math
import os
from fractions import Fraction
from typing import IO, Any, List, Sequence, Union

from nf_errors import NumberFieldInputError, StructuralMismatchError
from nf_poly import QQ, Polynomial

_logger = logging.getLogger(__name__)

Target = Union[str, "os.PathLike[str]", IO[str]]


def _common_denominator(coeffs: Sequence[Fraction]) -> int:
    d = 1
    for c in coeffs:
        d = d * c.denominator // math.gcd(d, c.denominator)
    return d


def _record(coeffs: Sequence[Fraction]) -> str:
    d = _common_denominator(coeffs)
    return " ".join(str(int(c * d)) for c in coeffs) + f" {d}"


def _parse_record(line: str, lineno: int) -> List[Fraction]:
    try:
        ints = [int(t) for t in line.split()]
    except ValueError as e:
        raise NumberFieldInputError(f"line {lineno}: expected integers, got {line!r}") from e
    if len(ints) < 2 or ints[-1] == 0:
        raise NumberFieldInputError(f"line {lineno}: malformed record {line!r}")
    d = ints[-1]
    return [Fraction(c, d) for c in ints[:-1]]


def _write(stream: IO[str], elements: Sequence[Any]) -> None:
    K = elements[0].parent
    if not (K.is_simple and K.base_field is QQ):
        raise StructuralMismatchError("only elements of absolute simple fields can be written")
    for x in elements:
        if x.parent is not K:
            raise StructuralMismatchError("all elements must share one parent field")
    stream.write(f"# {len(elements)} element(s) of a degree-{K.degree} number field\n")
    stream.write(_record(list(K.pol.coeffs)) + "\n")
    for x in elements:
        stream.write(_record(x.coordinates()) + "\n")


def write_elements(target: Target, elements: Sequence[Any]) -> None:
    """Write ``elements`` (same absolute simple parent) to a path or text stream."""
    elements = list(elements)
    if not elements:
        return
    if isinstance(target, (str, os.PathLike)):
        with open(target, "w", encoding="utf-8") as fh:
            _write(fh, elements)
    else:
        _write(target, elements)
    _logger.debug("wrote %d element(s)", len(elements))


def _read(stream: IO[str], K) -> List[Any]:
    out: List[Any] = []
    header_seen = False
    for lineno, raw in enumerate(stream, start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        coeffs = _parse_record(line, lineno)
        if not header_seen:
            header = Polynomial(QQ, coeffs)
            if header.degree() != K.degree or header.monic() != K.pol.monic():
                raise StructuralMismatchError(f"line {lineno}: header polynomial {header!r} does not define {K!r}")
            header_seen = True
            continue
        if len(coeffs) != K.degree:
            raise NumberFieldInputError(f"line {lineno}: expected {K.degree} coefficients, got {len(coeffs)}")
        out.append(K(coeffs))
    return out


def read_elements(source: Target, K) -> List[Any]:
    """Read an element list written by ``write_elements`` into the field K."""
    if not (K.is_simple and K.base_field is QQ):
        raise StructuralMismatchError("only absolute simple fields can be read into")
    if isinstance(source, (str, os.PathLike)):
        with open(source, "r", encoding="utf-8") as fh:
            return _read(fh, K)
    return _read(source, K)


def dumps(elements: Sequence[Any]) -> str:
    buf = io.StringIO()
    write_elements(buf, elements)
    return buf.getvalue()


def loads(text: str, K) -> List[Any]:
    return read_elements(io.StringIO(text), K)
