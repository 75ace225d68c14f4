"""
Result Verifier Module

Independent cross-checks for the step-generating engines. Determinants,
solutions and inverses are recomputed with SymPy (exact, over the rationals)
and NumPy (floating point) and compared with what the engines returned.

The engines never call this module; it exists for tests and for the
--verify flag of the command line front end, in the same way a numeric
tester verifies a symbolic calculator from the outside.
"""

from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import sympy as sp

from calculation_records import CalculationStep, DeterminantResult, InverseResult, Solution
from matrix_primitives import coerce_matrix, coerce_vector, validate_square, validate_system
from numeric_fields import DEFAULT_TOLERANCE, FLOAT_FIELD, RATIONAL_FIELD


class ResultVerifier:
    """
    Cross-check engine results against SymPy and NumPy.

    Attributes
    ----------
    tolerance : float
        Absolute tolerance of every floating comparison

    Every verify_* method returns a report dict with at least an 'is_valid'
    key; the remaining keys describe what was compared.
    """

    def __init__(self, tolerance: float = DEFAULT_TOLERANCE):
        if tolerance < 0:
            raise ValueError(f"tolerance must be non-negative (got {tolerance})")
        self.tolerance = tolerance

    # ------------------------------ Conversions ------------------------------
    @staticmethod
    def _sympy_matrix(matrix: Sequence[Sequence[Any]]) -> sp.Matrix:
        rows = coerce_matrix(matrix, RATIONAL_FIELD)
        return sp.Matrix([[v.to_sympy() for v in row] for row in rows])

    @staticmethod
    def _numpy_matrix(matrix: Sequence[Sequence[Any]]) -> np.ndarray:
        return np.array(coerce_matrix(matrix, FLOAT_FIELD), dtype=float)

    def _close(self, a: float, b: float) -> bool:
        return bool(np.isclose(a, b, rtol=1e-9, atol=self.tolerance))

    # --------------------------------- Trace ---------------------------------
    def check_trace(self, steps: Sequence[CalculationStep]) -> Dict[str, Any]:
        """
        Structural check of a step trace.

        Returns
        -------
        dict
            - 'is_valid': ids run 1..len(steps) and every snapshot is rectangular
            - 'step_count': number of steps
            - 'problems': list of human-readable findings
        """
        problems: List[str] = []
        for position, step in enumerate(steps, start=1):
            if step.id != position:
                problems.append(f"step at position {position} has id {step.id}")
            widths = {len(row) for row in step.matrix}
            if len(widths) > 1:
                problems.append(f"step {step.id} has a ragged snapshot")
            if step.rational_matrix is not None:
                shape = [len(row) for row in step.rational_matrix]
                if shape != [len(row) for row in step.matrix]:
                    problems.append(f"step {step.id} exact and floating snapshots differ in shape")
            width = len(step.matrix[0]) if step.matrix else 0
            if step.excluded_row is not None and not 0 <= step.excluded_row < len(step.matrix):
                problems.append(f"step {step.id} excludes a row outside the matrix")
            if step.excluded_col is not None and not 0 <= step.excluded_col < width:
                problems.append(f"step {step.id} excludes a column outside the matrix")
        return {
            'is_valid': not problems,
            'step_count': len(steps),
            'problems': problems,
        }

    # ------------------------------ Determinant ------------------------------
    def verify_determinant(self, matrix: Sequence[Sequence[Any]], result: DeterminantResult) -> Dict[str, Any]:
        """
        Compare a determinant result with SymPy (Berkowitz) and NumPy.

        The exact comparison is made only when the result carries a
        rational determinant.
        """
        rows = validate_square(matrix)
        exact_det = self._sympy_matrix(rows).det(method='berkowitz')
        numeric_det = float(np.linalg.det(self._numpy_matrix(rows)))

        exact_ok: Optional[bool] = None
        if result.rational_determinant is not None:
            exact_ok = bool(result.rational_determinant.to_sympy() == exact_det)

        numeric_ok = self._close(result.determinant, numeric_det)
        return {
            'is_valid': numeric_ok and exact_ok is not False,
            'exact_match': exact_ok,
            'numeric_match': numeric_ok,
            'expected': str(exact_det),
            'numpy_determinant': numeric_det,
        }

    # ------------------------------- Solutions -------------------------------
    def expected_classification(self, coefficients, constants) -> str:
        """'unique', 'infinite' or 'none' from the exact ranks of A and [A|b]."""
        rows, vector = validate_system(coefficients, constants)
        a = self._sympy_matrix(rows)
        b = sp.Matrix([v.to_sympy() for v in coerce_vector(vector, RATIONAL_FIELD)])
        rank_a = a.rank()
        rank_aug = a.row_join(b).rank()
        if rank_aug > rank_a:
            return "none"
        if rank_a < len(rows):
            return "infinite"
        return "unique"

    def verify_solution(self, coefficients, constants, solution: Solution) -> Dict[str, Any]:
        """
        Check a Solution against Ax = b.

        Returns
        -------
        dict
            - 'is_valid': classification agrees and, for unique solutions,
              the residual vanishes
            - 'classification' / 'expected_classification'
            - 'exact_residual': list of "p/q" strings (exact mode) or None
            - 'residual_norm': ||A x - b|| in floating point, or None
        """
        rows, vector = validate_system(coefficients, constants)
        expected = self.expected_classification(rows, vector)
        report: Dict[str, Any] = {
            'classification': solution.classification,
            'expected_classification': expected,
            'exact_residual': None,
            'residual_norm': None,
        }
        valid = solution.classification == expected

        if solution.is_unique:
            if solution.rational_variables is not None:
                a = self._sympy_matrix(rows)
                b = sp.Matrix([v.to_sympy() for v in coerce_vector(vector, RATIONAL_FIELD)])
                x = sp.Matrix([v.to_sympy() for v in solution.rational_variables])
                residual = a * x - b
                report['exact_residual'] = [str(v) for v in residual]
                valid = valid and all(v == 0 for v in residual)

            a_num = self._numpy_matrix(rows)
            b_num = np.array(coerce_vector(vector, FLOAT_FIELD), dtype=float)
            x_num = np.array(solution.variables, dtype=float)
            residual_norm = float(np.linalg.norm(a_num @ x_num - b_num))
            report['residual_norm'] = residual_norm
            valid = valid and residual_norm < self.tolerance * max(1.0, float(np.abs(b_num).max()))

        report['is_valid'] = bool(valid)
        return report

    # -------------------------------- Inverse --------------------------------
    def verify_inverse(self, matrix: Sequence[Sequence[Any]], result: InverseResult) -> Dict[str, Any]:
        """
        Check A × A^-1 and A^-1 × A against the identity.

        A result marked not invertible is valid when the exact determinant of
        the matrix is zero.
        """
        rows = validate_square(matrix)
        n = len(rows)
        exact_det = self._sympy_matrix(rows).det(method='berkowitz')

        if not result.is_invertible:
            singular = exact_det == 0
            return {
                'is_valid': bool(singular and not result.inverse_matrix),
                'singular': bool(singular),
                'left_error': None,
                'right_error': None,
                'exact_match': None,
            }

        a = self._numpy_matrix(rows)
        inv = np.array(result.inverse_matrix, dtype=float)
        identity = np.eye(n)
        left_error = float(np.abs(inv @ a - identity).max())
        right_error = float(np.abs(a @ inv - identity).max())
        numeric_ok = left_error < self.tolerance and right_error < self.tolerance

        exact_ok: Optional[bool] = None
        if result.rational_inverse_matrix:
            exact_inverse = self._sympy_matrix(rows).inv()
            candidate = sp.Matrix([[v.to_sympy() for v in row] for row in result.rational_inverse_matrix])
            exact_ok = bool(candidate == exact_inverse)

        return {
            'is_valid': bool(numeric_ok and exact_ok is not False and exact_det != 0),
            'singular': False,
            'left_error': left_error,
            'right_error': right_error,
            'exact_match': exact_ok,
        }
