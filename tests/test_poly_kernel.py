"""
Tests for the polynomial layer and the numeric kernel adapter
"""

from collections import Counter
from fractions import Fraction

import numpy as np
import pytest

import algebra_backend as kernel
from algebra_backend import Matrix
from nf_errors import NumberFieldInputError, NumericKernelError, StructuralMismatchError
from nf_poly import QQ, Polynomial, as_fraction_strict, coprime_base, interpolate


def P(*coeffs):
    return Polynomial(QQ, coeffs)


class TestStrictRationals:
    def test_accepts_int_fraction_and_string(self):
        assert as_fraction_strict(3) == Fraction(3)
        assert as_fraction_strict(Fraction(2, 6)) == Fraction(1, 3)
        assert as_fraction_strict(" 3/2 ") == Fraction(3, 2)
        assert as_fraction_strict(np.int64(5)) == Fraction(5)

    def test_rejects_float_and_complex(self):
        with pytest.raises(NumberFieldInputError):
            as_fraction_strict(0.5)
        with pytest.raises(NumberFieldInputError):
            as_fraction_strict(1j)
        with pytest.raises(NumberFieldInputError):
            QQ(1.25)

    def test_rejects_garbage_string(self):
        with pytest.raises(NumberFieldInputError):
            as_fraction_strict("three halves")


class TestPolynomial:
    def test_trailing_zeros_are_stripped(self):
        f = P(1, 2, 0, 0)
        assert f.coeffs == (Fraction(1), Fraction(2))
        assert f.degree() == 1
        assert P().degree() == -1
        assert not P(0, 0)

    def test_division_with_remainder(self):
        q, r = divmod(P(-1, 0, 1), P(-1, 1))
        assert q == P(1, 1)
        assert r.is_zero()
        q, r = divmod(P(1, 0, 1), P(-1, 1))
        assert q == P(1, 1)
        assert r == 2

    def test_exact_division_failure(self):
        with pytest.raises(NumberFieldInputError):
            P(1, 0, 1).exact_div(P(-1, 1))

    def test_gcd_is_monic(self):
        g = P(-2, 0, 2).gcd(P(2, -4, 2))
        assert g == P(-1, 1)

    def test_gcdex_bezout_identity(self):
        a, b = P(-2, 0, 1), P(1, 1)
        g, s, t = a.gcdex(b)
        assert g == 1
        assert s * a + t * b == g

    def test_evaluation_and_composition(self):
        f = P(-2, 0, 1)
        assert f(3) == 7
        assert f.compose(P(1, 1)) == P(-1, 2, 1)

    def test_squarefree_part(self):
        f = P(-1, 1) * P(-1, 1) * P(2, 1)
        assert not f.is_squarefree()
        assert f.squarefree_part() == P(-1, 1) * P(2, 1)

    def test_mixing_fields_is_an_error(self):
        from number_field import number_field

        K = number_field("x^2 - 5")
        with pytest.raises(StructuralMismatchError):
            P(1, 1) + Polynomial(K, [1, 1])

    def test_to_string(self):
        assert P(-2, 0, 1).to_string("x") == "x^2 - 2"
        assert P(Fraction(1, 2), -1).to_string("t") == "-t + 1/2"


class TestInterpolationAndCoprimeBase:
    def test_interpolate_recovers_polynomial(self):
        f = interpolate(QQ, [0, 1, 2], [1, 2, 5])
        assert f == P(1, 0, 1)

    def test_interpolate_rejects_repeated_nodes(self):
        with pytest.raises(NumberFieldInputError):
            interpolate(QQ, [1, 1], [2, 3])

    def test_coprime_base(self):
        a = P(-1, 1) * P(-2, 1)
        b = P(-2, 1) * P(-3, 1)
        base = coprime_base([a, b])
        assert sorted(p.coeffs for p in base) == sorted([P(-1, 1).coeffs, P(-2, 1).coeffs, P(-3, 1).coeffs])


class TestKernel:
    def test_factor_over_rationals(self):
        fac = kernel.factor(P(-1, 0, 0, 0, 1))
        assert fac == {P(-1, 1): 1, P(1, 1): 1, P(1, 0, 1): 1}

    def test_factor_multiplicities(self):
        fac = kernel.factor(P(-1, 1) * P(-1, 1) * P(3, 0, 1))
        assert fac[P(-1, 1)] == 2
        assert fac[P(3, 0, 1)] == 1

    def test_discriminant(self):
        assert kernel.discriminant(P(-2, 0, 0, 1)) == -108
        assert kernel.discriminant(P(-2, 0, 1)) == 8

    def test_parse_polynomial(self):
        assert kernel.parse_polynomial("x^3 - 2") == P(-2, 0, 0, 1)
        assert kernel.parse_polynomial("x**2/2 + 1") == P(1, 0, Fraction(1, 2))
        with pytest.raises(NumberFieldInputError):
            kernel.parse_polynomial("x^2 + y")

    def test_norm_resultant_of_linear_polynomial(self):
        # Norm(x - a) for a^2 = 2 is x^2 - 2
        rows = [P(0, -1), P(1)]
        assert kernel.norm_resultant(P(-2, 0, 1), rows, 0) == P(-2, 0, 1)

    def test_mod_p_services(self):
        assert not kernel.is_squarefree_mod_p(P(1, 0, 1), 2)
        assert kernel.factor_shape_mod_p(P(1, 0, 1), 5) == Counter({1: 2})
        assert kernel.factor_shape_mod_p(P(1, 0, 1), 3) == Counter({2: 1})
        assert kernel.reduce_mod_p(P(Fraction(1, 3), 1), 3) is None
        assert not kernel.has_good_reduction(P(1, 0, 3), 3)

    def test_inseparable_reduction_is_not_squarefree(self):
        # x^2 + 1 = (x + 1)^2 mod 2 while its derivative 2x vanishes
        assert not kernel.has_good_reduction(P(1, 0, 1), 2)
        assert kernel.has_good_reduction(P(1, 0, 1), 3)
        assert not kernel.is_squarefree_mod_p(P(1, 0, 0, 1), 3)

    def test_integer_services(self):
        assert kernel.next_prime(100000) == 100003
        assert kernel.factor_integer(360) == {2: 3, 3: 2, 5: 1}
        assert kernel.totient(12) == 4
        assert kernel.is_square(49) and not kernel.is_square(50) and not kernel.is_square(-4)

    def test_cyclotomic_polynomial_and_real_roots(self):
        assert kernel.cyclotomic_polynomial(12) == P(1, 0, -1, 0, 1)
        assert kernel.real_root_count(P(-2, 0, 0, 1)) == 1
        with pytest.raises(NumberFieldInputError):
            kernel.cyclotomic_polynomial(0)

    def test_complex_roots_and_evaluation(self):
        pts = kernel.complex_roots(P(-2, 0, 1))
        vals = kernel.evaluate_at(P(0, 0, 1), pts)
        assert np.allclose(vals, [2.0, 2.0])


class TestMatrix:
    def test_determinant_and_rank(self):
        assert Matrix(QQ, [[1, 2], [3, 4]]).determinant() == -2
        assert Matrix(QQ, [[1, 2], [2, 4]]).rank() == 1

    def test_nullspace(self):
        ns = Matrix(QQ, [[1, 2], [2, 4]]).nullspace()
        assert ns == [[Fraction(-2), Fraction(1)]]

    def test_solve_right(self):
        x = Matrix(QQ, [[2, 0], [0, 4]]).solve_right([2, 2])
        assert x == [Fraction(1), Fraction(1, 2)]

    def test_inconsistent_system(self):
        with pytest.raises(NumericKernelError):
            Matrix(QQ, [[1, 1], [1, 1]]).solve_right([0, 1])

    def test_ragged_rows_rejected(self):
        with pytest.raises(NumberFieldInputError):
            Matrix(QQ, [[1, 2], [3]])
