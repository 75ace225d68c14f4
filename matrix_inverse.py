"""
Matrix inverse by the adjugate method.

    A^-1 = adj(A) / det(A),   adj(A) = C^T,   C[i][j] = (-1)^(i+j) det(M_ij)

The determinant and every cofactor come from the cofactor expansion engine.
The trace ends with a self-check of A × A^-1 against the identity computed
with NumPy; the check is recorded but never changes the result.
"""

import warnings
from typing import Any, List, Optional, Sequence

import numpy as np

from calculation_records import InverseComputation, InverseResult, TraceBuilder
from laplace_expansion import CofactorExpansion
from matrix_primitives import (
    coerce_matrix,
    identity_matrix,
    minor,
    multiply_matrices,
    to_float_matrix,
    to_rational_matrix,
    transpose,
    validate_square,
)
from numeric_fields import DEFAULT_TOLERANCE, NumericField, field_for


class AdjugateInverse:
    """
    Step-generating inverse through cofactors and the adjugate.

    Attributes:
    -----------
    field : NumericField
        Arithmetic for the cofactors and the inverse
    tolerance : float
        Tolerance of the A × A^-1 = I self-check (default 1e-10)
    """

    def __init__(self, field: Optional[NumericField] = None, tolerance: float = DEFAULT_TOLERANCE):
        self.field = field if field is not None else field_for(True)
        self.tolerance = tolerance
        self.expansion = CofactorExpansion(self.field)

    def calculate_inverse(self, matrix: Sequence[Sequence[Any]]) -> InverseComputation:
        """
        Invert a square matrix, recording every cofactor.

        Returns:
        --------
        InverseComputation
            steps plus an InverseResult; a singular matrix gives
            is_invertible=False with empty inverse and adjugate

        Raises:
        -------
        ValueError
            If the matrix is empty, ragged or not square
        """
        fld = self.field
        fmt = fld.format
        work = coerce_matrix(validate_square(matrix), fld)
        n = len(work)
        trace = TraceBuilder(fld)

        trace.record(
            "Original matrix and procedure",
            "A^-1 by the adjugate method: (1) check det(A) ≠ 0, "
            "(2) cofactor matrix C(i,j) = (-1)^(i+j) × M(i,j), "
            "(3) adj(A) = C^T, (4) A^-1 = (1/det(A)) × adj(A). "
            "Sign rule: (i+j) even gives +, odd gives -",
            work,
            operation="Adjugate method",
        )

        det_result = self.expansion.calculate_determinant(work)
        det = fld.coerce(
            det_result.rational_determinant if fld.exact else det_result.determinant
        )
        trace.record(
            "Determinant",
            f"The matrix is invertible only if its determinant is nonzero. det(A) = {fmt(det)}",
            work,
            operation=f"det(A) = {fmt(det)}",
        )

        if fld.is_zero(det):
            trace.record(
                "Matrix is not invertible",
                "det(A) = 0, so the matrix is singular and has no inverse",
                work,
                operation="det(A) = 0 → no inverse",
            )
            result = InverseResult(
                determinant=fld.to_float(det),
                rational_determinant=fld.to_rational(det),
                is_invertible=False,
                rational_inverse_matrix=[] if fld.exact else None,
                rational_adjugate_matrix=[] if fld.exact else None,
            )
            return InverseComputation(steps=trace.steps, result=result)

        cofactors = self._cofactor_matrix(work, trace)
        trace.record(
            "Cofactor matrix",
            "All cofactors C(i,j) collected into the cofactor matrix",
            cofactors,
            operation="C = [C(i,j)]",
        )

        adjugate = transpose(cofactors)
        trace.record(
            "Adjugate matrix",
            "The adjugate is the transpose of the cofactor matrix: adj(A) = C^T",
            adjugate,
            operation="adj(A) = C^T",
        )

        inverse = [[fld.divide(v, det) for v in row] for row in adjugate]
        trace.record(
            "Inverse matrix",
            f"A^-1 = (1/det(A)) × adj(A) = (1/{fmt(det)}) × adj(A)",
            inverse,
            operation="A^-1 = (1/det(A)) × adj(A)",
        )

        float_matrix = to_float_matrix(work, fld)
        float_inverse = to_float_matrix(inverse, fld)
        product = np.asarray(float_matrix, dtype=float) @ np.asarray(float_inverse, dtype=float)
        identity = np.asarray(to_float_matrix(identity_matrix(n, fld), fld), dtype=float)
        verified = bool(np.allclose(product, identity, rtol=0.0, atol=self.tolerance))
        trace.record(
            "Verification",
            f"Check A × A^-1 = I (identity) within {self.tolerance:g}: "
            + ("correct" if verified else "mismatch"),
            multiply_matrices(work, inverse, fld),
            operation="A × A^-1 = I",
        )
        if not verified:
            warnings.warn(
                f"A × A^-1 differs from the identity by more than {self.tolerance:g}",
                RuntimeWarning,
            )

        result = InverseResult(
            determinant=fld.to_float(det),
            rational_determinant=fld.to_rational(det),
            is_invertible=True,
            inverse_matrix=float_inverse,
            adjugate_matrix=to_float_matrix(adjugate, fld),
            cofactor_matrix=to_float_matrix(cofactors, fld),
            rational_inverse_matrix=to_rational_matrix(inverse, fld),
            rational_adjugate_matrix=to_rational_matrix(adjugate, fld),
            verified=verified,
        )
        return InverseComputation(steps=trace.steps, result=result)

    def _cofactor_matrix(self, work: List[List[Any]], trace: TraceBuilder) -> List[List[Any]]:
        fld = self.field
        fmt = fld.format
        n = len(work)

        trace.record(
            "Computing cofactors",
            "Each cofactor is C(i,j) = (-1)^(i+j) × M(i,j), where M(i,j) is the "
            "determinant of the matrix without row i and column j; (i+j) even "
            "gives a positive sign, odd a negative sign",
            work,
            operation="Cofactor rule",
        )

        cofactors: List[List[Any]] = []
        for i in range(n):
            row = []
            for j in range(n):
                minor_det = self.expansion.determinant_value(minor(work, i, j))
                exponent = (i + 1) + (j + 1)
                parity = "even" if exponent % 2 == 0 else "odd"
                sign_text = "+" if exponent % 2 == 0 else "-"
                cofactor = fld.multiply(fld.sign_of(exponent), minor_det)
                row.append(cofactor)
                trace.record(
                    f"Cofactor C({i + 1},{j + 1})",
                    f"C({i + 1},{j + 1}) = (-1)^({i + 1}+{j + 1}) × M({i + 1},{j + 1}); "
                    f"exponent {exponent} is {parity} → sign {sign_text}; "
                    f"M({i + 1},{j + 1}) = {fmt(minor_det)} (matrix without row {i + 1} "
                    f"and column {j + 1}); C({i + 1},{j + 1}) = {fmt(cofactor)}",
                    work,
                    operation=f"C({i + 1},{j + 1}) = {fmt(cofactor)}",
                    excluded_row=i,
                    excluded_col=j,
                )
            cofactors.append(row)
        return cofactors


def calculate_inverse(
    matrix: Sequence[Sequence[Any]],
    *,
    exact: bool = True,
    field: Optional[NumericField] = None,
) -> InverseComputation:
    """Adjugate-method inverse with step trace (exact by default)."""
    return AdjugateInverse(field if field is not None else field_for(exact)).calculate_inverse(matrix)
