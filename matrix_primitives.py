"""
Matrix and vector primitives shared by the determinant, elimination, inverse
and Cramer's-rule engines.

Matrices are plain lists of rows. All helpers are generic over a
NumericField and return fresh lists; none of them mutates its arguments.
"""

from typing import Any, List, Sequence

from exact_rational import Rational
from numeric_fields import NumericField, format_decimal


Matrix = List[List[Any]]
Vector = List[Any]


# ----------------------------- Shape validation ------------------------------
def _rows_of(matrix: Any, name: str) -> List[List[Any]]:
    if isinstance(matrix, (str, bytes)):
        raise TypeError(f"{name} must be a sequence of rows, got {type(matrix).__name__}")
    try:
        rows = [list(row) for row in matrix]
    except TypeError as e:
        raise TypeError(
            f"{name} must be a sequence of rows, got {type(matrix).__name__}"
        ) from e
    return rows


def validate_matrix(matrix: Any, name: str = "matrix") -> Matrix:
    """Check that `matrix` is a non-empty rectangular sequence of rows."""
    rows = _rows_of(matrix, name)
    if not rows:
        raise ValueError(f"{name} cannot be empty")
    width = len(rows[0])
    if width == 0:
        raise ValueError(f"{name} rows cannot be empty")
    for i, row in enumerate(rows):
        if len(row) != width:
            raise ValueError(
                f"All rows of {name} must have the same length. "
                f"Row 1 has {width} entries, row {i + 1} has {len(row)}."
            )
    return rows


def is_square(matrix: Sequence[Sequence[Any]]) -> bool:
    return all(len(row) == len(matrix) for row in matrix)


def validate_square(matrix: Any, name: str = "matrix") -> Matrix:
    rows = validate_matrix(matrix, name)
    if not is_square(rows):
        raise ValueError(
            f"{name} must be square. Got {len(rows)} rows and {len(rows[0])} columns."
        )
    return rows


def validate_system(coefficients: Any, constants: Any):
    """Validate a square coefficient matrix and a matching constant vector."""
    rows = validate_square(coefficients, "coefficient matrix")
    if isinstance(constants, (str, bytes)):
        raise TypeError(f"constants must be a sequence, got {type(constants).__name__}")
    try:
        vector = list(constants)
    except TypeError as e:
        raise TypeError(
            f"constants must be a sequence, got {type(constants).__name__}"
        ) from e
    if len(vector) != len(rows):
        raise ValueError(
            f"constants must have one entry per equation. "
            f"Got {len(vector)} constants for {len(rows)} equations."
        )
    return rows, vector


# ------------------------------- Conversion ----------------------------------
def coerce_matrix(matrix: Sequence[Sequence[Any]], field: NumericField) -> Matrix:
    return [[field.coerce(v) for v in row] for row in matrix]


def coerce_vector(vector: Sequence[Any], field: NumericField) -> Vector:
    return [field.coerce(v) for v in vector]


def to_float_matrix(matrix: Sequence[Sequence[Any]], field: NumericField) -> List[List[float]]:
    return [[field.to_float(v) for v in row] for row in matrix]


def to_float_vector(vector: Sequence[Any], field: NumericField) -> List[float]:
    return [field.to_float(v) for v in vector]


def to_rational_matrix(matrix: Sequence[Sequence[Any]], field: NumericField):
    """Exact view of a matrix, or None when `field` is not exact."""
    if not field.exact:
        return None
    return [[field.to_rational(v) for v in row] for row in matrix]


# -------------------------------- Copying ------------------------------------
def clone_matrix(matrix: Sequence[Sequence[Any]]) -> Matrix:
    # Entries are immutable (float or Rational), so copying rows is a deep copy
    return [list(row) for row in matrix]


def clone_vector(vector: Sequence[Any]) -> Vector:
    return list(vector)


def identity_matrix(size: int, field: NumericField) -> Matrix:
    one, zero = field.one(), field.zero()
    return [[one if i == j else zero for j in range(size)] for i in range(size)]


# ----------------------------- Row operations --------------------------------
def swap_rows(matrix: Sequence[Sequence[Any]], row1: int, row2: int) -> Matrix:
    result = clone_matrix(matrix)
    result[row1], result[row2] = result[row2], result[row1]
    return result


def scale_row(matrix: Sequence[Sequence[Any]], row: int, scalar: Any, field: NumericField) -> Matrix:
    result = clone_matrix(matrix)
    result[row] = [field.multiply(v, scalar) for v in result[row]]
    return result


def add_row_multiple(
    matrix: Sequence[Sequence[Any]],
    target_row: int,
    source_row: int,
    multiplier: Any,
    field: NumericField,
) -> Matrix:
    """Return a copy with R_target <- R_target + multiplier * R_source."""
    result = clone_matrix(matrix)
    source = result[source_row]
    result[target_row] = [
        field.add(t, field.multiply(s, multiplier))
        for t, s in zip(result[target_row], source)
    ]
    return result


def augment(matrix: Sequence[Sequence[Any]], vector: Sequence[Any]) -> Matrix:
    return [list(row) + [vector[i]] for i, row in enumerate(matrix)]


def split_augmented(augmented: Sequence[Sequence[Any]]):
    """Split [A|b] into (A, b)."""
    return [list(row[:-1]) for row in augmented], [row[-1] for row in augmented]


def minor(matrix: Sequence[Sequence[Any]], excluded_row: int, excluded_col: int) -> Matrix:
    """Fresh (n-1)x(n-1) copy with one row and one column removed."""
    return [
        [v for j, v in enumerate(row) if j != excluded_col]
        for i, row in enumerate(matrix)
        if i != excluded_row
    ]


def replace_column(matrix: Sequence[Sequence[Any]], col: int, vector: Sequence[Any]) -> Matrix:
    return [
        [vector[i] if j == col else v for j, v in enumerate(row)]
        for i, row in enumerate(matrix)
    ]


def transpose(matrix: Sequence[Sequence[Any]]) -> Matrix:
    return [list(col) for col in zip(*matrix)]


def multiply_matrices(a: Sequence[Sequence[Any]], b: Sequence[Sequence[Any]], field: NumericField) -> Matrix:
    if len(a[0]) != len(b):
        raise ValueError(
            f"Cannot multiply a {len(a)}x{len(a[0])} matrix by a {len(b)}x{len(b[0])} matrix"
        )
    result = []
    for row in a:
        out = []
        for j in range(len(b[0])):
            total = field.zero()
            for k, v in enumerate(row):
                total = field.add(total, field.multiply(v, b[k][j]))
            out.append(total)
        result.append(out)
    return result


# ------------------------------ Pivot and rank -------------------------------
def find_pivot(matrix: Sequence[Sequence[Any]], start_row: int, col: int, field: NumericField) -> int:
    """
    Partial pivoting: index of the largest-magnitude entry of column `col`
    at or below `start_row`. Nonzero entries are preferred and the first
    index wins ties.
    """
    best_row = start_row
    best_value = matrix[start_row][col]
    best_mag = field.magnitude(best_value)
    for i in range(start_row + 1, len(matrix)):
        value = matrix[i][col]
        if field.is_zero(value):
            continue
        mag = field.magnitude(value)
        if field.is_zero(best_value) or mag > best_mag:
            best_row, best_value, best_mag = i, value, mag
    return best_row


def is_zero_row(row: Sequence[Any], field: NumericField) -> bool:
    return all(field.is_zero(v) for v in row)


def rank(matrix: Sequence[Sequence[Any]], field: NumericField) -> int:
    """Rank by forward elimination on a private copy."""
    work = clone_matrix(matrix)
    n_rows = len(work)
    n_cols = len(work[0]) if work else 0
    r = 0
    for c in range(n_cols):
        if r >= n_rows:
            break
        p = find_pivot(work, r, c, field)
        if field.is_zero(work[p][c]):
            continue
        if p != r:
            work = swap_rows(work, r, p)
        for i in range(r + 1, n_rows):
            if field.is_zero(work[i][c]):
                continue
            factor = field.divide(work[i][c], work[r][c])
            work = add_row_multiple(work, i, r, field.negate(factor), field)
        r += 1
    return r


# -------------------------------- Formatting ---------------------------------
def format_number(value: Any, precision: int = 4) -> str:
    if isinstance(value, Rational):
        return str(value)
    return format_decimal(value, precision)


def format_matrix(matrix: Sequence[Sequence[Any]], precision: int = 4) -> str:
    return "\n".join(
        "[" + ", ".join(format_number(v, precision) for v in row) + "]"
        for row in matrix
    )
