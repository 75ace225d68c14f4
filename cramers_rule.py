"""
Cramer's rule solver built on the cofactor expansion engine.

    x_i = det(A_i) / det(A)

where A_i is A with column i replaced by the constants. The traces of every
determinant are embedded, renumbered and relabeled, in the overall trace.
"""

from typing import Any, Optional, Sequence

from calculation_records import Solution, SolveResult, TraceBuilder
from laplace_expansion import CofactorExpansion
from matrix_primitives import (
    augment,
    coerce_matrix,
    coerce_vector,
    rank,
    replace_column,
    to_float_vector,
    validate_system,
)
from numeric_fields import NumericField, field_for


class CramersRule:
    """Step-generating Cramer's rule over a NumericField."""

    def __init__(self, field: Optional[NumericField] = None):
        self.field = field if field is not None else field_for(True)
        self.expansion = CofactorExpansion(self.field)

    def _determinant_of(self, result) -> Any:
        if self.field.exact:
            return result.rational_determinant
        return result.determinant

    def solve(self, coefficients: Sequence[Sequence[Any]], constants: Sequence[Any]) -> SolveResult:
        """
        Solve Ax = b with Cramer's rule.

        A zero main determinant is classified by comparing rank(A) with
        rank([A|b]): different ranks mean no solution, equal ranks mean
        infinitely many solutions.

        Raises:
        -------
        ValueError, TypeError
            On malformed shapes
        """
        fld = self.field
        fmt = fld.format
        rows, vector = validate_system(coefficients, constants)
        a = coerce_matrix(rows, fld)
        b = coerce_vector(vector, fld)
        aug = augment(a, b)
        n = len(a)
        trace = TraceBuilder(fld)

        trace.record(
            "System of equations",
            "Solve with Cramer's rule: x(i) = det(A(i)) / det(A), where A(i) is A "
            "with column i replaced by the constants",
            aug,
            operation="Cramer's rule",
        )

        main = self.expansion.calculate_determinant(a)
        trace.extend(
            main.steps,
            title_prefix="Main determinant - ",
            description_prefix="Determinant of the coefficient matrix: ",
        )
        det = self._determinant_of(main)

        if fld.is_zero(det):
            rank_a = rank(a, fld)
            rank_aug = rank(aug, fld)
            if rank_aug > rank_a:
                trace.record(
                    "Singular system without solution",
                    f"det(A) = 0 and rank([A|b]) = {rank_aug} > rank(A) = {rank_a}, "
                    f"so the equations are inconsistent",
                    aug,
                    operation="det(A) = 0 → no solution",
                )
                solution = Solution.inconsistent(
                    determinant=fld.to_float(det), rational_determinant=fld.to_rational(det)
                )
            else:
                trace.record(
                    "Singular system with infinitely many solutions",
                    f"det(A) = 0 and rank([A|b]) = rank(A) = {rank_a} < {n}, "
                    f"so the equations are dependent",
                    aug,
                    operation="det(A) = 0 → infinitely many solutions",
                )
                solution = Solution.infinite(
                    determinant=fld.to_float(det), rational_determinant=fld.to_rational(det)
                )
            return SolveResult(steps=trace.steps, solution=solution)

        values = []
        for i in range(n):
            replaced = replace_column(a, i, b)
            trace.record(
                f"Matrix for x{i + 1}",
                f"Replace column {i + 1} of A with the constant vector",
                replaced,
                operation=f"Matrix A{i + 1}",
                excluded_col=i,
            )

            sub = self.expansion.calculate_determinant(replaced)
            trace.extend(
                sub.steps,
                title_prefix=f"Det A{i + 1} - ",
                description_prefix=f"For x{i + 1}: ",
            )
            det_i = self._determinant_of(sub)
            value = fld.divide(det_i, det)
            values.append(value)

            trace.record(
                f"Compute x{i + 1}",
                f"x{i + 1} = det(A{i + 1}) / det(A) = {fmt(det_i)} / {fmt(det)} = {fmt(value)}",
                replaced,
                operation=f"x{i + 1} = {fmt(value)}",
            )

        trace.record(
            "Complete solution",
            "All variables computed with Cramer's rule",
            aug,
            operation="Solution: [" + ", ".join(fmt(v) for v in values) + "]",
        )

        solution = Solution.unique(
            to_float_vector(values, fld),
            rational_variables=[fld.to_rational(v) for v in values] if fld.exact else None,
            determinant=fld.to_float(det),
            rational_determinant=fld.to_rational(det),
        )
        return SolveResult(steps=trace.steps, solution=solution)


def solve_by_cramers_rule(
    coefficients: Sequence[Sequence[Any]],
    constants: Sequence[Any],
    *,
    exact: bool = True,
    field: Optional[NumericField] = None,
) -> SolveResult:
    """Cramer's rule with step trace (exact by default)."""
    return CramersRule(field if field is not None else field_for(exact)).solve(coefficients, constants)
