"""
Cofactor (Laplace) Expansion Engine

Computes determinants by recursive expansion along minors, recording every
decision in a step trace. At each level the row or column with the most zero
entries is chosen as the expansion axis, since every zero entry removes one
recursive subproblem.

Usage Example:
--------------
    from laplace_expansion import calculate_determinant

    result = calculate_determinant([[5, -2, 4], [6, 7, -3], [3, 0, 2]])
    print(result.rational_determinant)   # 28
    print(result.expansion_formula)      # det = (3) × (-22) - (0) × (-39) + (2) × (47)
    for step in result.steps:
        print(step.id, step.title)
"""

from typing import Any, NamedTuple, Optional, Sequence

from calculation_records import DeterminantResult, TraceBuilder
from matrix_primitives import Matrix, coerce_matrix, minor, validate_square
from numeric_fields import NumericField, field_for


class ExpansionAxis(NamedTuple):
    kind: str  # 'row' or 'column'
    index: int
    zero_count: int

    def label(self) -> str:
        return f"{self.kind} {self.index + 1}"


class CofactorExpansion:
    """
    Step-generating determinant by cofactor expansion.

    The same instance can be reused; all per-call state (step numbering,
    recursion level) lives in the TraceBuilder created by
    calculate_determinant().

    Attributes:
    -----------
    field : NumericField
        Arithmetic used for the computation (exact rationals or floats)

    Methods:
    --------
    calculate_determinant(matrix):
        Determinant with the full step trace and top-level expansion formula
    determinant_value(matrix):
        Same algorithm without a trace
    find_optimal_axis(matrix):
        Row/column with the strictly greatest number of zero entries
    """

    def __init__(self, field: Optional[NumericField] = None):
        self.field = field if field is not None else field_for(True)

    def calculate_determinant(self, matrix: Sequence[Sequence[Any]]) -> DeterminantResult:
        """
        Compute det(matrix) by cofactor expansion.

        Parameters:
        -----------
        matrix : sequence of sequences
            Square matrix of ints, floats, Rationals or "p/q" strings

        Returns:
        --------
        DeterminantResult
            steps, determinant (float), rational_determinant (exact mode)
            and expansion_formula

        Raises:
        -------
        ValueError
            If the matrix is empty, ragged or not square
        """
        rows = validate_square(matrix)
        work = coerce_matrix(rows, self.field)
        trace = TraceBuilder(self.field)
        mode = "exact fractions" if self.field.exact else "decimal arithmetic"

        trace.record(
            "Original matrix",
            f"Determinant by cofactor (Laplace) expansion using {mode}",
            work,
            operation="det(A) by Laplace expansion",
        )

        det = self._expand(work, trace, level=1)
        formula = self.build_expansion_formula(work)

        return DeterminantResult(
            steps=trace.steps,
            determinant=self.field.to_float(det),
            rational_determinant=self.field.to_rational(det),
            expansion_formula=formula,
        )

    def find_optimal_axis(self, matrix: Sequence[Sequence[Any]]) -> ExpansionAxis:
        """
        Pick the expansion axis with the strictly greatest zero count.

        Rows are scanned before columns and lower indices first, so ties go
        to the earliest row, then the earliest column.
        """
        is_zero = self.field.is_zero
        n = len(matrix)
        best = ExpansionAxis("row", 0, -1)

        for i in range(n):
            zeros = sum(1 for j in range(n) if is_zero(matrix[i][j]))
            if zeros > best.zero_count:
                best = ExpansionAxis("row", i, zeros)

        for j in range(n):
            zeros = sum(1 for i in range(n) if is_zero(matrix[i][j]))
            if zeros > best.zero_count:
                best = ExpansionAxis("column", j, zeros)

        return best

    def determinant_value(self, matrix: Sequence[Sequence[Any]]) -> Any:
        """Determinant as a field value, same algorithm, no trace."""
        fld = self.field
        n = len(matrix)
        if n == 0:
            return fld.one()
        if n == 1:
            return matrix[0][0]
        if n == 2:
            return self._det2(matrix)

        axis = self.find_optimal_axis(matrix)
        total = fld.zero()
        for i, j in self._axis_positions(axis, n):
            entry = matrix[i][j]
            if fld.is_zero(entry):
                continue
            cofactor = fld.multiply(fld.sign_of(i + j), self.determinant_value(minor(matrix, i, j)))
            total = fld.add(total, fld.multiply(entry, cofactor))
        return total

    def build_expansion_formula(self, matrix: Sequence[Sequence[Any]]) -> str:
        """
        Human-readable top-level expansion, e.g.
        "det = (3) × (-22) - (0) × (-39) + (2) × (47)".

        Each term shows |a_ij| and det(M_ij); the joining sign combines the
        cofactor parity with the sign of the entry.
        """
        fld = self.field
        n = len(matrix)
        if n == 1:
            return f"det = {fld.format(matrix[0][0])}"

        axis = self.find_optimal_axis(matrix)
        terms = []
        for k, (i, j) in enumerate(self._axis_positions(axis, n)):
            value = matrix[i][j]
            minor_det = self.determinant_value(minor(matrix, i, j))
            value_negative = fld.to_float(value) < 0 and not fld.is_zero(value)
            negative = ((i + j) % 2 == 1) != value_negative
            magnitude = fld.negate(value) if value_negative else value
            if k == 0:
                joiner = "-" if negative else ""
            else:
                joiner = " - " if negative else " + "
            terms.append(f"{joiner}({fld.format(magnitude)}) × ({fld.format(minor_det)})")
        return "det = " + "".join(terms)

    # ------------------------------ Internals -------------------------------
    @staticmethod
    def _axis_positions(axis: ExpansionAxis, n: int):
        if axis.kind == "row":
            return [(axis.index, k) for k in range(n)]
        return [(k, axis.index) for k in range(n)]

    def _det2(self, m: Sequence[Sequence[Any]]) -> Any:
        fld = self.field
        return fld.subtract(fld.multiply(m[0][0], m[1][1]), fld.multiply(m[0][1], m[1][0]))

    def _expand(self, matrix: Matrix, trace: TraceBuilder, level: int) -> Any:
        fld = self.field
        fmt = fld.format
        n = len(matrix)

        if n == 1:
            value = matrix[0][0]
            trace.record(
                f"1×1 matrix (level {level})",
                f"det = {fmt(value)}",
                matrix,
                operation=f"det = {fmt(value)}",
            )
            return value

        if n == 2:
            det = self._det2(matrix)
            a, b = matrix[0]
            c, d = matrix[1]
            trace.record(
                f"2×2 determinant (level {level})",
                f"det = ({fmt(a)})({fmt(d)}) - ({fmt(b)})({fmt(c)}) = {fmt(det)}",
                matrix,
                operation=f"det = {fmt(det)}",
            )
            return det

        axis = self.find_optimal_axis(matrix)
        trace.record(
            f"Expansion along {axis.label()} (level {level})",
            f"Expanding along {axis.label()} because it contains {axis.zero_count} "
            f"zero(s): det = Σ a(i,j) × C(i,j), where C(i,j) is the cofactor",
            matrix,
            operation=f"Use {axis.label()} ({axis.zero_count} zeros)",
        )

        total = fld.zero()
        for i, j in self._axis_positions(axis, n):
            entry = matrix[i][j]
            pos = f"({i + 1},{j + 1})"

            if fld.is_zero(entry):
                trace.record(
                    f"Term {pos} = 0 (level {level})",
                    f"a{pos} = 0, so this term does not contribute to the determinant",
                    matrix,
                    operation="Term skipped (entry = 0)",
                    excluded_row=i,
                    excluded_col=j,
                )
                continue

            sub = minor(matrix, i, j)
            trace.record(
                f"Minor M{pos} (level {level})",
                f"Minor obtained by removing row {i + 1} and column {j + 1}",
                matrix,
                operation=f"M{pos}",
                excluded_row=i,
                excluded_col=j,
            )

            minor_det = self._expand(sub, trace, level + 1)
            sign = fld.sign_of(i + j)
            cofactor = fld.multiply(sign, minor_det)
            contribution = fld.multiply(entry, cofactor)
            total = fld.add(total, contribution)

            trace.record(
                f"Cofactor C{pos} (level {level})",
                f"C{pos} = (-1)^({i + 1}+{j + 1}) × det(M{pos}) = "
                f"{fmt(sign)} × {fmt(minor_det)} = {fmt(cofactor)}",
                matrix,
                operation=f"C{pos} = {fmt(cofactor)}",
                excluded_row=i,
                excluded_col=j,
            )
            trace.record(
                f"Contribution of term {pos} (level {level})",
                f"a{pos} × C{pos} = {fmt(entry)} × {fmt(cofactor)} = {fmt(contribution)}; "
                f"running total = {fmt(total)}",
                matrix,
                operation=f"+({fmt(contribution)})",
            )

        trace.record(
            f"Determinant (level {level})",
            f"Sum of all expansion terms along {axis.label()}",
            matrix,
            operation=f"det = {fmt(total)}",
        )
        return total


def calculate_determinant(
    matrix: Sequence[Sequence[Any]],
    *,
    exact: bool = True,
    field: Optional[NumericField] = None,
) -> DeterminantResult:
    """Cofactor-expansion determinant with step trace (exact by default)."""
    return CofactorExpansion(field if field is not None else field_for(exact)).calculate_determinant(matrix)


def determinant_value(
    matrix: Sequence[Sequence[Any]],
    *,
    exact: bool = True,
    field: Optional[NumericField] = None,
) -> Any:
    """Step-free determinant as a field value (Rational when exact)."""
    fld = field if field is not None else field_for(exact)
    rows = validate_square(matrix)
    return CofactorExpansion(fld).determinant_value(coerce_matrix(rows, fld))
