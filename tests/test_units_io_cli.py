"""
Tests for torsion units, normal bases, element files and the command line
"""

import io
import logging
from fractions import Fraction

import pytest

from nf_cli import main
from nf_config import SplittingFieldConfig, TorsionConfig, configure_logging
from nf_errors import NumberFieldInputError, StructuralMismatchError
from nf_io import dumps, loads, read_elements, write_elements
from nf_poly import QQ, Polynomial
from nf_units import is_torsion_unit, normal_basis, torsion_unit_order
from number_field import NumberField, cyclotomic_field, number_field


def fresh(*coeffs, var="a"):
    return number_field(Polynomial(QQ, coeffs), var, cached=False)


class TestTorsionUnits:
    def test_roots_of_unity(self):
        z = cyclotomic_field(12).gen()
        assert is_torsion_unit(z)
        assert is_torsion_unit(z, check_is_unit=True)
        assert torsion_unit_order(z, 120) == 12
        assert torsion_unit_order(z ** 4, 12) == 3

    def test_fundamental_unit_is_not_torsion(self):
        K = fresh(-2, 0, 1)
        u = 1 + K.gen()
        assert not is_torsion_unit(u)
        assert not is_torsion_unit(u, check_is_unit=True)

    def test_rational_elements(self):
        K = fresh(-2, 0, 1)
        assert is_torsion_unit(K(-1))
        assert torsion_unit_order(K(-1), 2) == 2
        assert torsion_unit_order(K(1), 6) == 1
        assert not is_torsion_unit(K(Fraction(1, 2)), check_is_unit=True)
        assert not is_torsion_unit(K.zero())

    def test_non_unit_with_small_conjugates(self):
        # both conjugates of (1 + sqrt(-3))/4 have modulus 1/2
        K = fresh(3, 0, 1)
        assert not is_torsion_unit((1 + K.gen()) / 4)

    def test_relative_field(self):
        K = fresh(1, 0, 1)
        L = NumberField(Polynomial(K, [-2, 0, 1]), K, var="b")
        assert is_torsion_unit(L(K.gen()))
        assert not is_torsion_unit(L.gen())

    def test_order_must_divide(self):
        z = cyclotomic_field(12).gen()
        with pytest.raises(NumberFieldInputError):
            torsion_unit_order(z, 8)
        with pytest.raises(NumberFieldInputError):
            torsion_unit_order(z, 0)

    def test_tolerance_is_validated(self):
        assert 0.0 < TorsionConfig().tolerance < 1.0
        with pytest.raises(NumberFieldInputError):
            TorsionConfig(tolerance=2.0)


class TestNormalBasis:
    def test_quadratic(self):
        K = fresh(-2, 0, 1)
        x = normal_basis(K)
        assert all(c != 0 for c in x.coordinates())

    def test_cyclotomic(self):
        K = cyclotomic_field(5)
        x = normal_basis(K)
        conj = [K(x.as_polynomial().compose(Polynomial(QQ, [0] * j + [1]))) for j in range(1, 5)]
        from algebra_backend import Matrix

        assert Matrix(QQ, [c.coordinates() for c in conj]).rank() == 4

    def test_requires_nice_polynomial(self):
        with pytest.raises(StructuralMismatchError):
            normal_basis(fresh(-1, 0, 2))


class TestElementFiles:
    def test_round_trip(self):
        K = fresh(-2, 0, 0, 1)
        a = K.gen()
        elems = [K.zero(), K.one(), a, (1 + a) / 3, a ** 2 / 7 - Fraction(5, 6)]
        assert loads(dumps(elems), K) == elems

    def test_layout(self):
        K = fresh(-2, 0, 1)
        text = dumps([K([Fraction(1, 2), Fraction(1, 3)])])
        lines = [ln for ln in text.splitlines() if not ln.startswith("#")]
        assert lines == ["-2 0 1 1", "3 2 6"]

    def test_file_round_trip(self, tmp_path):
        K = fresh(-1, 0, 2)
        path = tmp_path / "elements.txt"
        write_elements(path, [K.gen(), K(Fraction(3, 4))])
        assert read_elements(path, K) == [K.gen(), K(Fraction(3, 4))]

    def test_header_mismatch(self):
        K, L = fresh(-2, 0, 1), fresh(-3, 0, 1)
        with pytest.raises(StructuralMismatchError):
            loads(dumps([K.gen()]), L)

    def test_malformed_records(self):
        K = fresh(-2, 0, 1)
        with pytest.raises(NumberFieldInputError):
            loads("-2 0 1 1\n1 x 1\n", K)
        with pytest.raises(NumberFieldInputError):
            loads("-2 0 1 1\n1 2 3 1\n", K)
        with pytest.raises(NumberFieldInputError):
            loads("-2 0 1 0\n", K)

    def test_mixed_parents_rejected(self):
        K, L = fresh(-2, 0, 1), fresh(-3, 0, 1)
        with pytest.raises(StructuralMismatchError):
            write_elements(io.StringIO(), [K.gen(), L.gen()])


class TestCommandLine:
    def test_splitting_field(self, capsys):
        assert main(["--quiet", "splitting-field", "x^3 - 2", "--roots"]) == 0
        out = capsys.readouterr().out
        assert "[RESULT] degree=6" in out
        assert "[ROOTS]" in out

    def test_isomorphic(self, capsys):
        assert main(["--quiet", "isomorphic", "x^2 - 2", "x^2 - 8"]) == 0
        assert main(["--quiet", "isomorphic", "x^2 - 2", "x^2 - 3"]) == 2
        assert "isomorphic=0" in capsys.readouterr().out

    def test_subfield(self, capsys):
        assert main(["--quiet", "subfield", "x^2 - 2", "x^4 - 10*x^2 + 1"]) == 0
        assert "subfield=1" in capsys.readouterr().out

    def test_compositum(self, capsys):
        assert main(["--quiet", "compositum", "x^2 - 2", "x^2 - 3"]) == 0
        assert "[RESULT] degree=4" in capsys.readouterr().out

    def test_bad_input(self, capsys):
        assert main(["--quiet", "splitting-field", "x^2 - y"]) == 1
        assert "[FATAL]" in capsys.readouterr().out

    def test_configure_logging_keeps_existing_handlers(self):
        root = logging.getLogger()
        before = list(root.handlers)
        root.addHandler(logging.NullHandler())
        try:
            configure_logging(logging.DEBUG)
            assert len(root.handlers) == len(before) + 1
            assert root.level == logging.DEBUG
        finally:
            root.handlers = before
            root.setLevel(logging.WARNING)


class TestSplittingConfig:
    def test_validation(self):
        assert SplittingFieldConfig().max_steps is None
        with pytest.raises(NumberFieldInputError):
            SplittingFieldConfig(max_steps=-1)
