"""
Tests for the cramers_rule module
"""

import numpy as np
import pytest

from cramers_rule import CramersRule, solve_by_cramers_rule
from exact_rational import Rational
from gauss_jordan import solve


class TestCramerSolutions:
    """x_i = det(A_i) / det(A)"""

    def test_two_by_two(self):
        solution = solve_by_cramers_rule([[2, 1], [1, 3]], [6, 13]).solution
        assert solution.is_unique
        assert solution.rational_variables == [Rational(1), Rational(4)]
        assert solution.rational_determinant == 5

    def test_two_by_two_fractional_answer(self):
        solution = solve_by_cramers_rule([[2, 1], [1, 3]], [8, 13]).solution
        assert solution.rational_variables == [Rational(11, 5), Rational(18, 5)]
        assert solution.variables == pytest.approx([2.2, 3.6])

    def test_three_by_three(self):
        solution = solve_by_cramers_rule([[2, 1, -1], [-3, -1, 2], [-2, 1, 2]], [8, -11, -3]).solution
        assert solution.rational_variables == [Rational(2), Rational(3), Rational(-1)]

    def test_one_by_one(self):
        solution = solve_by_cramers_rule([[4]], [2]).solution
        assert solution.rational_variables == [Rational(1, 2)]

    def test_fraction_input(self):
        solution = solve_by_cramers_rule([["1/2", 0], [0, "1/3"]], [1, 1]).solution
        assert solution.rational_variables == [Rational(2), Rational(3)]

    def test_decimal_mode(self):
        solution = solve_by_cramers_rule([[2, 1], [1, 3]], [8, 13], exact=False).solution
        assert solution.rational_variables is None
        assert solution.variables == pytest.approx([2.2, 3.6])

    @pytest.mark.parametrize("n", [1, 2, 3, 4, 5])
    def test_agrees_with_gauss_jordan(self, n):
        rng = np.random.RandomState(40 + n)
        a = (rng.randint(-3, 4, size=(n, n)) + np.eye(n, dtype=int) * 15).tolist()
        b = rng.randint(-9, 10, size=n).tolist()
        cramer = solve_by_cramers_rule(a, b).solution
        gauss = solve(a, b).solution
        assert cramer.rational_variables == gauss.rational_variables
        assert cramer.rational_determinant == gauss.rational_determinant


class TestCramerSingular:
    """det(A) = 0 is classified from the ranks of A and [A|b]"""

    def test_infinitely_many(self):
        result = solve_by_cramers_rule([[1, 2], [2, 4]], [3, 6])
        assert result.solution.has_infinite_solutions
        assert result.solution.rational_determinant == 0
        assert result.steps[-1].title == "Singular system with infinitely many solutions"

    def test_no_solution(self):
        result = solve_by_cramers_rule([[1, 2], [2, 4]], [3, 7])
        assert result.solution.has_no_solution
        assert result.steps[-1].title == "Singular system without solution"

    def test_zero_matrix_with_zero_constants(self):
        assert solve_by_cramers_rule([[0, 0], [0, 0]], [0, 0]).solution.has_infinite_solutions

    def test_zero_matrix_with_nonzero_constants(self):
        assert solve_by_cramers_rule([[0, 0], [0, 0]], [0, 1]).solution.has_no_solution

    def test_no_replaced_matrices_recorded(self):
        titles = [s.title for s in solve_by_cramers_rule([[1, 2], [2, 4]], [3, 7]).steps]
        assert not any(t.startswith("Matrix for x") for t in titles)


class TestCramerTrace:
    """Embedded determinant traces are renumbered and relabeled"""

    def setup_method(self):
        self.steps = solve_by_cramers_rule([[2, 1], [1, 3]], [6, 13]).steps
        self.titles = [s.title for s in self.steps]

    def test_ids_contiguous(self):
        assert [s.id for s in self.steps] == list(range(1, len(self.steps) + 1))

    def test_order_of_sections(self):
        assert self.titles[0] == "System of equations"
        assert self.titles[1] == "Main determinant - Original matrix"
        x1 = self.titles.index("Matrix for x1")
        x2 = self.titles.index("Matrix for x2")
        assert self.titles[x1 + 1] == "Det A1 - Original matrix"
        assert self.titles[x2 + 1] == "Det A2 - Original matrix"
        assert self.titles.index("Compute x1") < x2
        assert self.titles[-1] == "Complete solution"

    def test_description_prefix(self):
        det_a1 = [s for s in self.steps if s.title.startswith("Det A1 - ")]
        assert det_a1
        assert all(s.description.startswith("For x1: ") for s in det_a1)

    def test_replaced_matrix_snapshot(self):
        step = self.steps[self.titles.index("Matrix for x1")]
        assert step.rational_matrix == ((Rational(6), Rational(1)), (Rational(13), Rational(3)))
        assert step.excluded_col == 0

    def test_compute_step_text(self):
        step = self.steps[self.titles.index("Compute x2")]
        assert step.description == "x2 = det(A2) / det(A) = 20 / 5 = 4"
        assert step.operation == "x2 = 4"

    def test_solver_reusable(self):
        solver = CramersRule()
        first = solver.solve([[2, 1], [1, 3]], [6, 13])
        second = solver.solve([[2, 1], [1, 3]], [6, 13])
        assert len(first.steps) == len(second.steps)

    def test_shape_errors(self):
        with pytest.raises(ValueError, match="one entry per equation"):
            solve_by_cramers_rule([[1, 0], [0, 1]], [1, 2, 3])
        with pytest.raises(ValueError, match="must be square"):
            solve_by_cramers_rule([[1, 0, 0], [0, 1, 0]], [1, 2])
