"""
Tests for number fields, their elements and the field constructors
"""

from fractions import Fraction

import pytest

from nf_errors import NumberFieldInputError, StructuralMismatchError
from nf_nonsimple import non_simple_number_field
from nf_poly import QQ, Polynomial
from number_field import (
    NumberField,
    cyclotomic_field,
    discriminant,
    is_defining_polynomial_nice,
    number_field,
    quadratic_field,
    radical_extension,
    rationals_as_number_field,
    set_name,
    signature,
    wildanger_field,
)


def fresh(*coeffs, var="a"):
    return number_field(Polynomial(QQ, coeffs), var, cached=False)


class TestElementArithmetic:
    def test_ring_operations(self):
        K = fresh(-2, 0, 1)
        a = K.gen()
        assert a * a == 2
        assert (1 + a) * (1 - a) == -1
        assert a - a == 0
        assert -a + a == K.zero()
        assert 3 * a == a + a + a

    def test_inverse_and_division(self):
        K = fresh(-2, 0, 1)
        a = K.gen()
        assert (1 + a).inverse() == a - 1
        assert 1 / (1 + a) == a - 1
        assert a / a == 1
        assert a ** -2 == Fraction(1, 2)
        with pytest.raises(ZeroDivisionError):
            K.zero().inverse()

    def test_rational_coefficients(self):
        K = fresh(-2, 0, 1)
        x = K([Fraction(1, 3), Fraction(2, 5)])
        assert x.coordinates() == [Fraction(1, 3), Fraction(2, 5)]
        assert not x.is_rational()
        assert K(Fraction(7, 2)).to_rational() == Fraction(7, 2)

    def test_reduction_modulo_defining_polynomial(self):
        K = fresh(-2, 0, 0, 1)
        assert K(Polynomial(QQ, [0, 0, 0, 1])) == 2
        assert K.gen() ** 4 == 2 * K.gen()

    def test_floats_are_rejected(self):
        K = fresh(-2, 0, 1)
        with pytest.raises(NumberFieldInputError):
            K.gen() + 0.5
        with pytest.raises(NumberFieldInputError):
            K(1.5)

    def test_hash_matches_rationals(self):
        K = fresh(-2, 0, 1)
        assert hash(K(3)) == hash(Fraction(3))
        assert len({K.gen(), K.gen() + 0, K(1)}) == 2

    def test_too_many_coefficients(self):
        K = fresh(-2, 0, 1)
        with pytest.raises(NumberFieldInputError):
            K([1, 2, 3])


class TestElementInvariants:
    def test_norm_trace_minpoly(self):
        K = fresh(-2, 0, 1)
        x = 1 + K.gen()
        assert x.norm() == -1
        assert x.trace() == 2
        assert x.minpoly() == Polynomial(QQ, [-1, -2, 1])

    def test_cube_root_norm(self):
        K = fresh(-2, 0, 0, 1)
        assert K.gen().norm() == 2
        assert K.gen().trace() == 0
        assert K(3).minpoly() == Polynomial(QQ, [-3, 1])

    def test_integrality(self):
        K = fresh(-5, 0, 1)
        golden = (1 + K.gen()) / 2
        assert golden.is_integral()
        assert golden.minpoly() == Polynomial(QQ, [-1, -1, 1])
        assert not (K.gen() / 2).is_integral()
        assert K(4).is_integer()


class TestConstructors:
    def test_cache_returns_same_field(self):
        assert number_field("x^2 - 7") is number_field("x^2 - 7")
        assert number_field("x^2 - 7", cached=False) is not number_field("x^2 - 7")

    def test_reducible_polynomial_rejected(self):
        with pytest.raises(NumberFieldInputError):
            number_field("x^2 - 4")
        with pytest.raises(NumberFieldInputError):
            number_field(Polynomial(QQ, [5]))

    def test_uids_are_distinct(self):
        K, L = fresh(-2, 0, 1), fresh(-2, 0, 1)
        assert K.uid != L.uid
        assert K.uid > 0

    def test_quadratic_field(self):
        K = quadratic_field(-1)
        assert K.var == "sqrt(-1)"
        assert K.name.startswith("Imaginary")
        assert K.gen() ** 2 == -1
        assert quadratic_field(3).name.startswith("Real")
        with pytest.raises(NumberFieldInputError):
            quadratic_field(4)

    def test_quadratic_field_with_huge_discriminant(self):
        d = 2 ** 127 - 1
        K = quadratic_field(d, check=False)
        assert K.var == "sqrt(1701..5727)"

    def test_cyclotomic_field(self):
        K = cyclotomic_field(5)
        assert K.degree == 4
        assert K.is_cyclotomic_type() == (True, 5)
        assert K.gen() ** 5 == 1
        assert fresh(-2, 0, 1).is_cyclotomic_type() == (False, 0)

    def test_set_cyclotomic_order(self):
        K = fresh(1, 1, 1)
        K.set_cyclotomic_order(3)
        assert K.is_cyclotomic_type() == (True, 3)
        with pytest.raises(NumberFieldInputError):
            K.set_cyclotomic_order(6)

    def test_radical_extension(self):
        K = radical_extension(3, 5, cached=False)
        assert K.gen() ** 3 == 5
        assert K.absolute_degree == 3

    def test_wildanger_field(self):
        K = wildanger_field(3, 13, cached=False)
        assert K.pol.coeffs == (-13, 13, -13, 1)

    def test_rationals_as_number_field(self):
        K = rationals_as_number_field()
        assert K.degree == 1
        assert K.gen() == 1

    def test_set_name(self):
        K = fresh(-2, 0, 1)
        set_name(K, "Q(sqrt 2)")
        assert repr(K) == "Q(sqrt 2)"
        with pytest.raises(NumberFieldInputError):
            set_name(K, 2)


class TestFieldInvariants:
    def test_signature(self):
        assert signature(fresh(-2, 0, 0, 1)) == (1, 1)
        assert signature(fresh(1, 0, -10, 0, 1)) == (4, 0)
        assert signature(fresh(1, 0, 1)) == (0, 1)

    def test_discriminant(self):
        assert discriminant(fresh(-2, 0, 1)) == 8
        assert discriminant(fresh(-2, 0, 0, 1)) == -108

    def test_nice_polynomials(self):
        assert is_defining_polynomial_nice(fresh(-2, 0, 1))
        assert not is_defining_polynomial_nice(fresh(-1, 0, 2))
        assert not is_defining_polynomial_nice(fresh(Fraction(1, 2), 0, 1))


class TestRelativeFields:
    def test_tower_arithmetic(self):
        M = fresh(-2, 0, 1)
        L = number_field(Polynomial(M, [-3, 0, 1]), "b", cached=False)
        a, b = M.gen(), L.gen()
        assert L.degree == 2 and L.absolute_degree == 4
        assert b * b == 3
        assert (a + b) ** 2 == 5 + 2 * a * b
        assert b + a == a + b

    def test_relative_field_registers_backward_link(self):
        M = fresh(-2, 0, 1)
        L = NumberField(Polynomial(M, [-3, 0, 1]), M, var="b")
        assert L in M.lattice.live_superfields()

    def test_reducible_relative_polynomial_rejected(self):
        M = fresh(-2, 0, 1)
        with pytest.raises(NumberFieldInputError):
            NumberField(Polynomial(M, [-8, 0, 1]), M)

    def test_relative_invariants(self):
        M = fresh(-2, 0, 1)
        L = NumberField(Polynomial(M, [-3, 0, 1]), M, var="b")
        assert signature(L) == (4, 0)
        assert L.gen().norm() == -3
        assert L.gen().absolute_norm() == 9
        assert (M.gen() * L.gen()).absolute_trace() == 0

    def test_base_element_meets_relative_element(self):
        M = fresh(-2, 0, 1)
        L = NumberField(Polynomial(M, [-3, 0, 1]), M, var="b")
        a, b = M.gen(), L.gen()
        s = a + b
        assert s.parent is L
        assert s == L(a) + b
        assert (a * b).parent is L
        assert (a - b) + b == L(a)
        assert a == L(a) and L(a) == a
        assert hash(a) == hash(L(a))

    def test_foreign_polynomial_rejected(self):
        M = fresh(-2, 0, 1)
        N = fresh(-3, 0, 1)
        with pytest.raises(StructuralMismatchError):
            NumberField(Polynomial(N, [N.gen(), 1]), M)


class TestNonSimpleFields:
    def test_arithmetic(self):
        N = non_simple_number_field(["x^2 - 2", "x^2 - 3"])
        a1, a2 = N.gens()
        assert N.degree == 4
        assert a1 * a1 == 2
        assert (a1 + a2) ** 2 == 5 + 2 * a1 * a2
        assert (a1 + a2) * (a1 + a2).inverse() == 1

    def test_primitive_element(self):
        N = non_simple_number_field(["x^2 - 2", "x^2 - 3"])
        gamma, f = N.primitive_element()
        assert f.degree() == 4
        assert f(gamma) == 0

    def test_not_a_field(self):
        with pytest.raises(NumberFieldInputError):
            non_simple_number_field(["x^2 - 2", "x^2 - 8"])

    def test_coordinates_and_basis(self):
        N = non_simple_number_field(["x^2 - 2", "x^3 - 5"])
        assert len(N.basis()) == 6
        x = N.from_vector(range(6))
        assert x.coordinates() == [Fraction(i) for i in range(6)]
        assert N.gen(1) ** 3 == 5
