"""
Gaussian / Gauss-Jordan Elimination Engine

Row reduction with partial pivoting, in three forms:

- calculate_determinant: forward elimination, det = (-1)^swaps × Π diagonal
- solve: Gauss-Jordan (pivots normalized to 1, forward then backward
  elimination to reduced row-echelon form)
- solve_by_gaussian_elimination: forward elimination, then rank/consistency
  classification and back-substitution

A column without a usable pivot never aborts a solve: it is recorded and
skipped, and the system is classified from the final echelon form
(inconsistent row -> no solution, rank < n -> infinitely many solutions).

Usage Example:
--------------
    from gauss_jordan import solve

    result = solve([[2, 1], [1, 3]], [6, 13])
    print(result.solution.rational_variables)   # [Rational(1, 1), Rational(4, 1)]
"""

from typing import Any, List, Optional, Sequence, Tuple

from calculation_records import DeterminantResult, Solution, SolveResult, TraceBuilder
from matrix_primitives import (
    Matrix,
    add_row_multiple,
    augment,
    coerce_matrix,
    coerce_vector,
    find_pivot,
    is_zero_row,
    scale_row,
    split_augmented,
    swap_rows,
    to_float_vector,
    validate_square,
    validate_system,
)
from numeric_fields import NumericField, field_for


class RowReduction:
    """
    Step-generating elimination over a NumericField.

    Every row operation goes through matrix_primitives and yields a fresh
    working matrix; recorded steps snapshot it by value.
    """

    def __init__(self, field: Optional[NumericField] = None):
        self.field = field if field is not None else field_for(True)

    # ------------------------------ Determinant -----------------------------
    def calculate_determinant(self, matrix: Sequence[Sequence[Any]]) -> DeterminantResult:
        """
        Determinant by forward elimination with partial pivoting.

        Stops with det = 0 as soon as a column has no nonzero entry at or
        below the diagonal.

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
        swap_count = 0

        trace.record(
            "Original matrix",
            "Determinant by Gaussian elimination: reduce to upper triangular form, "
            "then multiply the diagonal",
            work,
            operation="det(A) = ?",
        )

        for i in range(n):
            p = find_pivot(work, i, i, fld)
            if fld.is_zero(work[p][i]):
                trace.record(
                    "Determinant = 0",
                    f"Column {i + 1} has no nonzero entry at or below row {i + 1}, "
                    f"so the matrix is singular and det(A) = 0",
                    work,
                    operation="det(A) = 0",
                )
                zero = fld.zero()
                return DeterminantResult(
                    steps=trace.steps,
                    determinant=fld.to_float(zero),
                    rational_determinant=fld.to_rational(zero),
                    swap_count=swap_count,
                )

            if p != i:
                work = swap_rows(work, i, p)
                swap_count += 1
                trace.record(
                    "Row swap",
                    f"Swap R{i + 1} ↔ R{p + 1} to bring the largest pivot into place "
                    f"(this flips the sign of the determinant)",
                    work,
                    operation=f"R{i + 1} ↔ R{p + 1}",
                    row_index=i,
                    pivot=work[i][i],
                )

            pivot = work[i][i]
            for k in range(i + 1, n):
                if fld.is_zero(work[k][i]):
                    continue
                factor = fld.divide(work[k][i], pivot)
                work = add_row_multiple(work, k, i, fld.negate(factor), fld)
                trace.record(
                    f"Elimination - row {k + 1}",
                    f"Eliminate the entry at ({k + 1}, {i + 1}) with pivot {fmt(pivot)}",
                    work,
                    operation=f"R{k + 1} = R{k + 1} - ({fmt(factor)}) × R{i + 1}",
                    row_index=k,
                    pivot=pivot,
                )

        det = fld.one()
        for i in range(n):
            det = fld.multiply(det, work[i][i])
        if swap_count % 2 == 1:
            det = fld.negate(det)

        diagonal = " × ".join(f"({fmt(work[i][i])})" for i in range(n))
        sign_part = f"(-1)^{swap_count} × " if swap_count % 2 == 1 else ""
        trace.record(
            "Final determinant",
            f"det(A) = {sign_part}{diagonal} = {fmt(det)}"
            + (f" ({swap_count} row swap(s))" if swap_count else ""),
            work,
            operation=f"det(A) = {fmt(det)}",
        )

        return DeterminantResult(
            steps=trace.steps,
            determinant=fld.to_float(det),
            rational_determinant=fld.to_rational(det),
            swap_count=swap_count,
        )

    # ------------------------------ Gauss-Jordan -----------------------------
    def solve(self, coefficients: Sequence[Sequence[Any]], constants: Sequence[Any]) -> SolveResult:
        """
        Solve Ax = b by Gauss-Jordan elimination to reduced row-echelon form.

        Parameters:
        -----------
        coefficients : square matrix A
        constants : vector b with one entry per row of A

        Returns:
        --------
        SolveResult
            steps plus a Solution classified as unique, infinite or none

        Raises:
        -------
        ValueError, TypeError
            On malformed shapes
        """
        fld = self.field
        fmt = fld.format
        aug, n = self._augmented(coefficients, constants)
        trace = TraceBuilder(fld)

        trace.record(
            "Initial augmented matrix",
            "System written as the augmented matrix [A|b] (Gauss-Jordan method)",
            aug,
            operation="Initial setup",
        )

        aug, pivots, swap_count, det = self._forward(aug, n, trace, normalize=True)

        # Backward phase: clear the entries above every pivot
        for r, c in reversed(pivots):
            for k in range(r - 1, -1, -1):
                if fld.is_zero(aug[k][c]):
                    continue
                factor = aug[k][c]
                aug = add_row_multiple(aug, k, r, fld.negate(factor), fld)
                trace.record(
                    "Backward elimination",
                    f"Eliminate the entry at ({k + 1}, {c + 1}) using row {r + 1}",
                    aug,
                    operation=f"R{k + 1} = R{k + 1} - ({fmt(factor)}) × R{r + 1}",
                    row_index=k,
                    pivot=aug[r][c],
                )

        solution = self._classify(aug, n, pivots, trace, det, swap_count)
        if solution is None:
            _, values = split_augmented(aug)
            trace.record(
                "Reduced row-echelon form",
                "The coefficient block is the identity, so the last column holds the "
                "solution: " + ", ".join(f"x{i + 1} = {fmt(v)}" for i, v in enumerate(values)),
                aug,
                operation="Solution: [" + ", ".join(fmt(v) for v in values) + "]",
            )
            solution = self._unique(values, det)

        return SolveResult(steps=trace.steps, solution=solution)

    # --------------------------- Gaussian elimination ------------------------
    def solve_by_gaussian_elimination(
        self, coefficients: Sequence[Sequence[Any]], constants: Sequence[Any]
    ) -> SolveResult:
        """
        Solve Ax = b by forward elimination and back-substitution.

        After the forward phase the echelon form is classified: a zero
        coefficient row with a nonzero constant means no solution, fewer
        nonzero rows than unknowns means infinitely many solutions, otherwise
        x[i] = (b[i] - Σ_{j>i} a[i][j] x[j]) / a[i][i] from the last row up.
        """
        fld = self.field
        fmt = fld.format
        aug, n = self._augmented(coefficients, constants)
        trace = TraceBuilder(fld)

        trace.record(
            "Initial augmented matrix",
            "System written as the augmented matrix [A|b] (Gaussian elimination)",
            aug,
            operation="Initial setup",
        )

        aug, pivots, swap_count, det = self._forward(aug, n, trace, normalize=False)

        solution = self._classify(aug, n, pivots, trace, det, swap_count)
        if solution is not None:
            return SolveResult(steps=trace.steps, solution=solution)

        trace.record(
            "Back substitution",
            "Solve from the last equation up to the first",
            aug,
            operation="Start back substitution",
        )

        values: List[Any] = [None] * n
        for i in range(n - 1, -1, -1):
            total = aug[i][n]
            subtracted = ""
            for j in range(i + 1, n):
                if fld.is_zero(aug[i][j]):
                    continue
                total = fld.subtract(total, fld.multiply(aug[i][j], values[j]))
                subtracted += f" - ({fmt(aug[i][j])})({fmt(values[j])})"
            values[i] = fld.divide(total, aug[i][i])
            trace.record(
                f"Compute x{i + 1}",
                f"x{i + 1} = ({fmt(aug[i][n])}{subtracted}) / {fmt(aug[i][i])} = {fmt(values[i])}",
                aug,
                operation=f"x{i + 1} = {fmt(values[i])}",
                row_index=i,
                pivot=aug[i][i],
            )

        return SolveResult(steps=trace.steps, solution=self._unique(values, det))

    # ------------------------------- Internals --------------------------------
    def _augmented(self, coefficients, constants) -> Tuple[Matrix, int]:
        rows, vector = validate_system(coefficients, constants)
        a = coerce_matrix(rows, self.field)
        b = coerce_vector(vector, self.field)
        return augment(a, b), len(a)

    def _forward(self, aug: Matrix, n: int, trace: TraceBuilder, normalize: bool):
        """
        Forward phase over the n coefficient columns of `aug`.

        Returns the reduced matrix, the pivot positions, the number of row
        swaps and the determinant of the coefficient block (zero when a
        column is skipped).
        """
        fld = self.field
        fmt = fld.format
        pivots: List[Tuple[int, int]] = []
        swap_count = 0
        det = fld.one()
        r = 0

        for c in range(n):
            if r >= n:
                break
            p = find_pivot(aug, r, c, fld)
            if fld.is_zero(aug[p][c]):
                det = fld.zero()
                trace.record(
                    f"No pivot in column {c + 1}",
                    f"Every entry of column {c + 1} at or below row {r + 1} is zero; "
                    f"the column is skipped and x{c + 1} has no pivot",
                    aug,
                    operation=f"Skip column {c + 1}",
                    row_index=r,
                )
                continue

            if p != r:
                aug = swap_rows(aug, r, p)
                swap_count += 1
                trace.record(
                    "Row swap",
                    f"Swap row {r + 1} ↔ row {p + 1} to use the largest available pivot",
                    aug,
                    operation=f"R{r + 1} ↔ R{p + 1}",
                    row_index=r,
                    pivot=aug[r][c],
                )

            pivot = aug[r][c]
            det = fld.multiply(det, pivot)

            if normalize and pivot != fld.one():
                aug = scale_row(aug, r, fld.divide(fld.one(), pivot), fld)
                trace.record(
                    "Normalize pivot",
                    f"Divide row {r + 1} by {fmt(pivot)} so the pivot becomes 1",
                    aug,
                    operation=f"R{r + 1} = R{r + 1} ÷ ({fmt(pivot)})",
                    row_index=r,
                    pivot=pivot,
                )

            for k in range(r + 1, n):
                if fld.is_zero(aug[k][c]):
                    continue
                factor = fld.divide(aug[k][c], aug[r][c])
                aug = add_row_multiple(aug, k, r, fld.negate(factor), fld)
                trace.record(
                    "Forward elimination",
                    f"Eliminate the entry at ({k + 1}, {c + 1}) using row {r + 1}",
                    aug,
                    operation=f"R{k + 1} = R{k + 1} - ({fmt(factor)}) × R{r + 1}",
                    row_index=k,
                    pivot=aug[r][c],
                )

            pivots.append((r, c))
            r += 1

        if len(pivots) == n and swap_count % 2 == 1:
            det = fld.negate(det)
        return aug, pivots, swap_count, det

    def _classify(self, aug, n, pivots, trace, det, swap_count) -> Optional[Solution]:
        """Solution for degenerate systems, None when the solution is unique."""
        fld = self.field
        fmt = fld.format

        for i in range(n):
            if is_zero_row(aug[i][:n], fld) and not fld.is_zero(aug[i][n]):
                trace.record(
                    "Inconsistent system",
                    f"Row {i + 1} reads [0 0 ... 0 | {fmt(aug[i][n])}] with a nonzero "
                    f"constant, so the system has no solution",
                    aug,
                    operation="No solution",
                    row_index=i,
                )
                return Solution.inconsistent(
                    determinant=fld.to_float(fld.zero()),
                    rational_determinant=fld.to_rational(fld.zero()),
                )

        rank = sum(1 for i in range(n) if not is_zero_row(aug[i][:n], fld))
        if rank < n:
            pivot_cols = {c for _, c in pivots}
            free = [f"x{c + 1}" for c in range(n) if c not in pivot_cols]
            trace.record(
                "Infinitely many solutions",
                f"The rank of the coefficient matrix is {rank} < {n}; "
                f"free variable(s): {', '.join(free)}",
                aug,
                operation="Infinitely many solutions",
            )
            return Solution.infinite(
                determinant=fld.to_float(fld.zero()),
                rational_determinant=fld.to_rational(fld.zero()),
            )
        return None

    def _unique(self, values: List[Any], det: Any) -> Solution:
        fld = self.field
        rational = [fld.to_rational(v) for v in values] if fld.exact else None
        return Solution.unique(
            to_float_vector(values, fld),
            rational_variables=rational,
            determinant=fld.to_float(det),
            rational_determinant=fld.to_rational(det),
        )


def calculate_determinant(
    matrix: Sequence[Sequence[Any]],
    *,
    exact: bool = True,
    field: Optional[NumericField] = None,
) -> DeterminantResult:
    """Elimination determinant with step trace (exact by default)."""
    return RowReduction(field if field is not None else field_for(exact)).calculate_determinant(matrix)


def solve(
    coefficients: Sequence[Sequence[Any]],
    constants: Sequence[Any],
    *,
    exact: bool = True,
    field: Optional[NumericField] = None,
) -> SolveResult:
    """Gauss-Jordan solve with step trace (exact by default)."""
    return RowReduction(field if field is not None else field_for(exact)).solve(coefficients, constants)


def solve_by_gaussian_elimination(
    coefficients: Sequence[Sequence[Any]],
    constants: Sequence[Any],
    *,
    exact: bool = True,
    field: Optional[NumericField] = None,
) -> SolveResult:
    """Gaussian elimination + back-substitution with step trace."""
    return RowReduction(
        field if field is not None else field_for(exact)
    ).solve_by_gaussian_elimination(coefficients, constants)
