"""
Tests for the matrix_inverse module (adjugate method)
"""

import warnings

import numpy as np
import pytest
import sympy as sp

from exact_rational import Rational
from matrix_inverse import AdjugateInverse, calculate_inverse


def _invertible(n, seed):
    rng = np.random.RandomState(seed)
    m = rng.randint(-3, 4, size=(n, n))
    m += np.eye(n, dtype=int) * 20
    return m.tolist()


class TestInverseValues:
    """Exact and decimal inverses"""

    def test_two_by_two(self):
        result = calculate_inverse([[1, 2], [3, 4]]).result
        assert result.is_invertible
        assert result.rational_determinant == -2
        assert result.rational_inverse_matrix == [
            [Rational(-2), Rational(1)],
            [Rational(3, 2), Rational(-1, 2)],
        ]
        assert result.inverse_matrix == [[-2.0, 1.0], [1.5, -0.5]]
        assert result.cofactor_matrix == [[4.0, -3.0], [-2.0, 1.0]]
        assert result.adjugate_matrix == [[4.0, -2.0], [-3.0, 1.0]]
        assert result.verified is True

    def test_one_by_one(self):
        result = calculate_inverse([[4]]).result
        assert result.rational_inverse_matrix == [[Rational(1, 4)]]
        assert result.cofactor_matrix == [[1.0]]

    def test_matches_sympy(self):
        m = [[2, 0, 1], [1, 3, 2], [1, 1, 2]]
        result = calculate_inverse(m).result
        assert result.rational_determinant == 6
        expected = sp.Matrix(m).inv()
        got = sp.Matrix([[v.to_sympy() for v in row] for row in result.rational_inverse_matrix])
        assert got == expected

    def test_decimal_mode(self):
        result = calculate_inverse([[1, 2], [3, 4]], exact=False).result
        assert result.rational_inverse_matrix is None
        assert result.rational_determinant is None
        assert np.allclose(result.inverse_matrix, [[-2.0, 1.0], [1.5, -0.5]])

    @pytest.mark.parametrize("n", [2, 3, 4, 5])
    def test_inverse_times_matrix_is_identity(self, n):
        m = _invertible(n, seed=20 + n)
        inv = np.array(calculate_inverse(m).result.inverse_matrix)
        a = np.array(m, dtype=float)
        assert np.allclose(inv @ a, np.eye(n), atol=1e-10)
        assert np.allclose(a @ inv, np.eye(n), atol=1e-10)

    def test_exact_mode_raises_no_warning(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            calculate_inverse([[1, 2], [3, 4]])


class TestSingularMatrix:
    """det = 0 ends the computation with is_invertible=False"""

    def test_singular(self):
        computation = calculate_inverse([[1, 2], [2, 4]])
        result = computation.result
        assert not result.is_invertible
        assert result.inverse_matrix == []
        assert result.rational_inverse_matrix == []
        assert result.rational_adjugate_matrix == []
        assert result.verified is None
        assert computation.steps[-1].title == "Matrix is not invertible"

    def test_singular_decimal(self):
        result = calculate_inverse([[1.0, 2.0], [2.0, 4.0]], exact=False).result
        assert not result.is_invertible
        assert result.rational_inverse_matrix is None


class TestInverseTrace:
    """Recorded steps of the adjugate method"""

    def test_step_sequence(self):
        titles = [s.title for s in calculate_inverse([[1, 2], [3, 4]]).steps]
        assert titles[:3] == ["Original matrix and procedure", "Determinant", "Computing cofactors"]
        assert titles[-4:] == ["Cofactor matrix", "Adjugate matrix", "Inverse matrix", "Verification"]
        assert titles.count("Cofactor C(1,1)") == 1

    def test_cofactor_steps_mark_excluded_cells(self):
        steps = calculate_inverse([[1, 2], [3, 4]]).steps
        c12 = [s for s in steps if s.title == "Cofactor C(1,2)"][0]
        assert (c12.excluded_row, c12.excluded_col) == (0, 1)
        assert c12.operation == "C(1,2) = -3"
        assert "odd" in c12.description

    def test_verification_snapshot_is_identity(self):
        last = calculate_inverse([[1, 2], [3, 4]]).steps[-1]
        assert last.rational_matrix == ((Rational(1), Rational(0)), (Rational(0), Rational(1)))

    def test_ids_contiguous(self):
        steps = calculate_inverse(_invertible(3, seed=3)).steps
        assert [s.id for s in steps] == list(range(1, len(steps) + 1))

    def test_cofactors_skip_traced_expansion(self, monkeypatch):
        engine = AdjugateInverse()
        traced = []
        original = engine.expansion.calculate_determinant

        def counting(matrix):
            traced.append(len(matrix))
            return original(matrix)

        monkeypatch.setattr(engine.expansion, "calculate_determinant", counting)
        m = _invertible(4, seed=11)
        result = engine.calculate_inverse(m).result
        assert traced == [4]
        assert np.allclose(np.array(result.inverse_matrix), np.linalg.inv(np.array(m, dtype=float)))

    def test_cofactor_values_match_sympy(self):
        m = [[2, 0, 1], [1, 3, 2], [1, 1, 2]]
        steps = calculate_inverse(m).steps
        expected = sp.Matrix(m).cofactor_matrix()
        for i in range(3):
            for j in range(3):
                step = [s for s in steps if s.title == f"Cofactor C({i + 1},{j + 1})"][0]
                assert step.operation == f"C({i + 1},{j + 1}) = {expected[i, j]}"

    def test_custom_tolerance(self):
        engine = AdjugateInverse(tolerance=1e-6)
        assert "1e-06" in engine.calculate_inverse([[2]]).steps[-1].description

    def test_non_square_raises(self):
        with pytest.raises(ValueError, match="must be square"):
            calculate_inverse([[1, 2, 3], [4, 5, 6]])
