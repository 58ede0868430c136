"""
Tests for subfield and isomorphism detection, composita and linear disjointness
"""

import pytest

from nf_config import SubfieldTestConfig
from nf_errors import NumberFieldInputError, StructuralMismatchError
from nf_lattice import common_super, has_embedding
from nf_poly import QQ, Polynomial
from nf_subfields import compositum, is_linearly_disjoint, isisomorphic, issubfield, issubfield_normal
from number_field import NumberField, cyclotomic_field, number_field


def fresh(*coeffs, var="a"):
    return number_field(Polynomial(QQ, coeffs), var, cached=False)


class TestIsomorphism:
    def test_identical_polynomials(self):
        K, L = fresh(-2, 0, 1), fresh(-2, 0, 1)
        ok, f = isisomorphic(K, L)
        assert ok
        assert f.image == L.gen()

    def test_scaled_generator(self):
        K, L = fresh(-2, 0, 1), fresh(-8, 0, 1)
        ok, f = isisomorphic(K, L)
        assert ok
        assert f.image ** 2 == 2
        assert f(K.gen() + 1) == f.image + 1

    def test_different_discriminants(self):
        ok, f = isisomorphic(fresh(-2, 0, 1), fresh(-3, 0, 1))
        assert not ok
        assert not f.image

    def test_different_signatures(self):
        ok, _ = isisomorphic(fresh(-2, 0, 1), fresh(2, 0, 1))
        assert not ok

    def test_different_degrees(self):
        ok, _ = isisomorphic(fresh(-2, 0, 1), fresh(-2, 0, 0, 1))
        assert not ok

    def test_relative_fields_rejected(self):
        K = fresh(-2, 0, 1)
        L = NumberField(Polynomial(K, [-3, 0, 1]), K, var="b")
        with pytest.raises(StructuralMismatchError):
            isisomorphic(L, K)


class TestSubfield:
    def test_quadratic_in_biquadratic(self):
        K, L = fresh(-2, 0, 1), fresh(1, 0, -10, 0, 1)
        ok, f = issubfield(K, L)
        assert ok
        assert f.image ** 2 == 2
        assert not has_embedding(K, L)

    def test_not_a_subfield(self):
        ok, f = issubfield(fresh(-5, 0, 1), fresh(1, 0, -10, 0, 1))
        assert not ok
        assert not f.image

    def test_degree_does_not_divide(self):
        ok, _ = issubfield(fresh(-2, 0, 0, 1), fresh(1, 0, -10, 0, 1))
        assert not ok

    def test_normal_variant(self):
        ok, f = issubfield_normal(fresh(1, 0, 1), cyclotomic_field(12))
        assert ok
        assert f.image ** 2 == -1

    def test_cube_root_in_its_splitting_field(self):
        from nf_splitting import splitting_field

        S = splitting_field(Polynomial(QQ, [-2, 0, 0, 1]))
        ok, f = issubfield(fresh(-2, 0, 0, 1), S)
        assert ok
        assert f.image ** 3 == 2

    def test_quadratic_in_field_with_inseparable_reduction(self):
        # minimal polynomial of 3i + 2^(1/3), a square mod 2
        L = fresh(733, 108, 243, -4, 27, 0, 1)
        ok, f = issubfield(fresh(1, 0, 1), L)
        assert ok
        assert f.image ** 2 == -1

    def test_config_is_validated(self):
        with pytest.raises(NumberFieldInputError):
            SubfieldTestConfig(first_prime=1)
        with pytest.raises(NumberFieldInputError):
            SubfieldTestConfig(iso_min_primes=-1)
        cfg = SubfieldTestConfig(primes_per_degree=0)
        ok, _ = issubfield(fresh(-2, 0, 1), fresh(1, 0, -10, 0, 1), config=cfg)
        assert ok


class TestCompositum:
    def test_two_quadratics(self):
        K, L = fresh(-2, 0, 1), fresh(-3, 0, 1)
        C, mK, mL = compositum(K, L)
        assert C.absolute_degree == 4
        assert mK(K.gen()) ** 2 == 2
        assert mL(L.gen()) ** 2 == 3
        assert has_embedding(K, C) and has_embedding(L, C)
        assert common_super(K, L) is C
        assert (K.gen() * L.gen()) ** 2 == 6

    def test_subfield_of_the_normal_field(self):
        K, L = fresh(-2, 0, 1), fresh(-8, 0, 1)
        C, mK, mL = compositum(K, L)
        assert C is L
        assert mK.image ** 2 == 2
        assert mL.image == L.gen()
        assert has_embedding(K, L)

    def test_cubic_with_its_quadratic_resolvent(self):
        K, L = fresh(-2, 0, 0, 1), fresh(3, 0, 1)
        C, mK, mL = compositum(K, L)
        assert C.absolute_degree == 6
        assert mK.image ** 3 == 2
        assert mL.image ** 2 == -3


class TestLinearDisjointness:
    def test_coprime_degrees(self):
        assert is_linearly_disjoint(fresh(-2, 0, 1), fresh(-2, 0, 0, 1))

    def test_coprime_discriminants(self):
        assert is_linearly_disjoint(fresh(-3, 0, 1), fresh(1, 1, 1, 1, 1))

    def test_independent_quadratics(self):
        assert is_linearly_disjoint(fresh(-2, 0, 1), fresh(-3, 0, 1))

    def test_same_field(self):
        assert not is_linearly_disjoint(fresh(-2, 0, 1), fresh(-8, 0, 1))
