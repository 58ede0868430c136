#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Command line front end.

    python nf_cli.py splitting-field "x^3 - 2" [--roots]
    python nf_cli.py isomorphic "x^2 - 2" "x^2 - 8"
    python nf_cli.py subfield "x^2 - 2" "x^4 - 10*x^2 + 1"
    python nf_cli.py compositum "x^2 - 2" "x^2 - 3"

Exit codes: 0 positive answer, 2 negative answer, 1 error.
"""

from __future__ import annotations

import argparse
import logging
from typing import List, Optional

import algebra_backend as kernel
from nf_config import configure_logging
from nf_errors import NumberFieldError
from nf_poly import QQ
from nf_splitting import splitting_field
from nf_subfields import compositum, isisomorphic, issubfield
from number_field import number_field


def _field(text: str):
    return number_field(kernel.parse_polynomial(text), "a")


def _cmd_splitting_field(args: argparse.Namespace) -> int:
    f = kernel.parse_polynomial(args.polynomial)
    if args.roots:
        S, roots = splitting_field(f, do_roots=True)
    else:
        S, roots = splitting_field(f), None
    pol = "x" if S is QQ else S.pol.to_string("x")
    print(f"[RESULT] degree={S.absolute_degree} polynomial={pol}")
    if roots is not None:
        print(f"[ROOTS] {', '.join(repr(r) for r in roots)}")
    return 0


def _cmd_isomorphic(args: argparse.Namespace) -> int:
    K, L = _field(args.first), _field(args.second)
    ok, f = isisomorphic(K, L)
    if ok:
        print(f"[RESULT] isomorphic=1 image={f.image!r}")
        return 0
    print("[RESULT] isomorphic=0")
    return 2


def _cmd_subfield(args: argparse.Namespace) -> int:
    K, L = _field(args.first), _field(args.second)
    ok, f = issubfield(K, L)
    if ok:
        print(f"[RESULT] subfield=1 image={f.image!r}")
        return 0
    print("[RESULT] subfield=0")
    return 2


def _cmd_compositum(args: argparse.Namespace) -> int:
    K, L = _field(args.first), _field(args.second)
    C, mK, mL = compositum(K, L)
    print(f"[RESULT] degree={C.absolute_degree} polynomial={C.pol.to_string('x')}")
    print(f"[IMAGES] first={mK.image!r} second={mL.image!r}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Number fields: splitting fields, isomorphism and subfield tests")
    parser.add_argument("--quiet", action="store_true", help="suppress logs")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("splitting-field", help="splitting field of a polynomial over QQ")
    p.add_argument("polynomial", help='e.g. "x^3 - 2"')
    p.add_argument("--roots", action="store_true", help="also print the roots")
    p.set_defaults(handler=_cmd_splitting_field)

    for name, handler, helptext in (
        ("isomorphic", _cmd_isomorphic, "are the two fields isomorphic?"),
        ("subfield", _cmd_subfield, "does the first field embed into the second?"),
        ("compositum", _cmd_compositum, "compositum (second field assumed normal)"),
    ):
        p = sub.add_parser(name, help=helptext)
        p.add_argument("first", help="defining polynomial of the first field")
        p.add_argument("second", help="defining polynomial of the second field")
        p.set_defaults(handler=handler)

    args = parser.parse_args(argv)
    configure_logging(logging.WARNING if args.quiet else logging.INFO)
    try:
        return args.handler(args)
    except NumberFieldError as ex:
        print(f"[FATAL] {ex}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
