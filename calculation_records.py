"""
Step trace and result records.

A CalculationStep is a frozen, numbered snapshot of one moment of an
algorithm. A TraceBuilder is created per top-level call and owns the step
counter, so independent calls never share numbering state.
"""

from dataclasses import dataclass, field as dc_field, replace
from typing import Any, Dict, List, Optional, Sequence, Tuple

from exact_rational import Rational
from matrix_primitives import clone_vector
from numeric_fields import NumericField


FloatSnapshot = Tuple[Tuple[float, ...], ...]
RationalSnapshot = Tuple[Tuple[Rational, ...], ...]


@dataclass(frozen=True)
class CalculationStep:
    id: int
    title: str
    description: str
    matrix: FloatSnapshot
    rational_matrix: Optional[RationalSnapshot] = None
    operation: Optional[str] = None
    row_index: Optional[int] = None
    pivot_element: Optional[float] = None
    pivot_fraction: Optional[Rational] = None
    excluded_row: Optional[int] = None
    excluded_col: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready form; rationals become "p/q" strings."""
        data: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "matrix": [list(row) for row in self.matrix],
        }
        if self.rational_matrix is not None:
            data["rational_matrix"] = [[str(v) for v in row] for row in self.rational_matrix]
        for key in ("operation", "row_index", "pivot_element", "excluded_row", "excluded_col"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        if self.pivot_fraction is not None:
            data["pivot_fraction"] = str(self.pivot_fraction)
        return data


class TraceBuilder:
    """
    Append-only step sequence for one top-level computation.

    record() snapshots the working matrix by value (tuples of immutable
    entries), so later in-place work on the matrix never alters emitted steps.
    """

    def __init__(self, field: NumericField):
        self.field = field
        self._steps: List[CalculationStep] = []

    @property
    def next_id(self) -> int:
        return len(self._steps) + 1

    @property
    def steps(self) -> List[CalculationStep]:
        return list(self._steps)

    def __len__(self) -> int:
        return len(self._steps)

    def snapshot(self, matrix: Sequence[Sequence[Any]]):
        fld = self.field
        floats = tuple(tuple(fld.to_float(v) for v in row) for row in matrix)
        exact = None
        if fld.exact:
            exact = tuple(tuple(fld.to_rational(v) for v in row) for row in matrix)
        return floats, exact

    def record(
        self,
        title: str,
        description: str,
        matrix: Sequence[Sequence[Any]],
        *,
        operation: Optional[str] = None,
        row_index: Optional[int] = None,
        pivot: Any = None,
        excluded_row: Optional[int] = None,
        excluded_col: Optional[int] = None,
    ) -> CalculationStep:
        floats, exact = self.snapshot(matrix)
        pivot_element = None
        pivot_fraction = None
        if pivot is not None:
            pivot_element = self.field.to_float(pivot)
            pivot_fraction = self.field.to_rational(pivot)
        step = CalculationStep(
            id=self.next_id,
            title=title,
            description=description,
            matrix=floats,
            rational_matrix=exact,
            operation=operation,
            row_index=row_index,
            pivot_element=pivot_element,
            pivot_fraction=pivot_fraction,
            excluded_row=excluded_row,
            excluded_col=excluded_col,
        )
        self._steps.append(step)
        return step

    def extend(
        self,
        steps: Sequence[CalculationStep],
        title_prefix: str = "",
        description_prefix: str = "",
    ) -> None:
        """Embed steps from another run, renumbered after the current ones."""
        for step in steps:
            self._steps.append(
                replace(
                    step,
                    id=self.next_id,
                    title=f"{title_prefix}{step.title}",
                    description=f"{description_prefix}{step.description}",
                )
            )


# ------------------------------- Result records -------------------------------
@dataclass(frozen=True)
class Solution:
    variables: List[float] = dc_field(default_factory=list)
    rational_variables: Optional[List[Rational]] = None
    determinant: Optional[float] = None
    rational_determinant: Optional[Rational] = None
    is_unique: bool = False
    has_infinite_solutions: bool = False
    has_no_solution: bool = False

    def __post_init__(self):
        flags = (self.is_unique, self.has_infinite_solutions, self.has_no_solution)
        if sum(bool(f) for f in flags) != 1:
            raise ValueError(
                "Exactly one of is_unique, has_infinite_solutions and "
                "has_no_solution must be set"
            )
        if not self.is_unique and self.variables:
            raise ValueError("variables must be empty unless the solution is unique")

    @classmethod
    def unique(cls, variables, rational_variables=None, determinant=None, rational_determinant=None):
        return cls(
            variables=clone_vector(variables),
            rational_variables=None if rational_variables is None else clone_vector(rational_variables),
            determinant=determinant,
            rational_determinant=rational_determinant,
            is_unique=True,
        )

    @classmethod
    def infinite(cls, determinant=None, rational_determinant=None):
        return cls(
            determinant=determinant,
            rational_determinant=rational_determinant,
            has_infinite_solutions=True,
        )

    @classmethod
    def inconsistent(cls, determinant=None, rational_determinant=None):
        return cls(
            determinant=determinant,
            rational_determinant=rational_determinant,
            has_no_solution=True,
        )

    @property
    def classification(self) -> str:
        if self.is_unique:
            return "unique"
        if self.has_infinite_solutions:
            return "infinite"
        return "none"

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "classification": self.classification,
            "variables": list(self.variables),
            "is_unique": self.is_unique,
            "has_infinite_solutions": self.has_infinite_solutions,
            "has_no_solution": self.has_no_solution,
        }
        if self.rational_variables is not None:
            data["rational_variables"] = [str(v) for v in self.rational_variables]
        if self.determinant is not None:
            data["determinant"] = self.determinant
        if self.rational_determinant is not None:
            data["rational_determinant"] = str(self.rational_determinant)
        return data


@dataclass(frozen=True)
class InverseResult:
    determinant: float
    is_invertible: bool
    inverse_matrix: List[List[float]] = dc_field(default_factory=list)
    adjugate_matrix: List[List[float]] = dc_field(default_factory=list)
    cofactor_matrix: List[List[float]] = dc_field(default_factory=list)
    rational_determinant: Optional[Rational] = None
    rational_inverse_matrix: Optional[List[List[Rational]]] = None
    rational_adjugate_matrix: Optional[List[List[Rational]]] = None
    verified: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        def _str_matrix(m):
            return None if m is None else [[str(v) for v in row] for row in m]

        data: Dict[str, Any] = {
            "determinant": self.determinant,
            "is_invertible": self.is_invertible,
            "inverse_matrix": self.inverse_matrix,
            "adjugate_matrix": self.adjugate_matrix,
            "cofactor_matrix": self.cofactor_matrix,
            "verified": self.verified,
        }
        if self.rational_determinant is not None:
            data["rational_determinant"] = str(self.rational_determinant)
        if self.rational_inverse_matrix is not None:
            data["rational_inverse_matrix"] = _str_matrix(self.rational_inverse_matrix)
        if self.rational_adjugate_matrix is not None:
            data["rational_adjugate_matrix"] = _str_matrix(self.rational_adjugate_matrix)
        return data


@dataclass(frozen=True)
class DeterminantResult:
    steps: List[CalculationStep]
    determinant: float
    rational_determinant: Optional[Rational] = None
    expansion_formula: Optional[str] = None
    swap_count: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"determinant": self.determinant}
        if self.rational_determinant is not None:
            data["rational_determinant"] = str(self.rational_determinant)
        if self.expansion_formula is not None:
            data["expansion_formula"] = self.expansion_formula
        if self.swap_count is not None:
            data["swap_count"] = self.swap_count
        return data


@dataclass(frozen=True)
class SolveResult:
    steps: List[CalculationStep]
    solution: Solution


@dataclass(frozen=True)
class InverseComputation:
    steps: List[CalculationStep]
    result: InverseResult
