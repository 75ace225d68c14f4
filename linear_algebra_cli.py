#!/usr/bin/env python3
"""
Command line front end: determinant, solve or inverse with a full step trace.

Examples
--------
  python linear_algebra_cli.py --matrix "5,-2,4;6,7,-3;3,0,2"
  python linear_algebra_cli.py --matrix "2,1;1,3" --constants "6,13" --method gaussian
  python linear_algebra_cli.py --matrix "1,2;3,4" --method inverse --out-prefix out/inv --latex

Outputs (with --out-prefix):
- <prefix>.steps.json:  the step trace, one object per step
- <prefix>.meta.json:   input, method, mode and the final result
- <prefix>.tex:         LaTeX of the final result (with --latex)

Decimal entries become fractions. A decimal that would need a denominator
above 10000 is replaced by the closest fraction within that limit, and a
warning naming the fraction is printed.
"""

import argparse
import json
import os
from typing import Any, List, Optional, Tuple

import sympy as sp

import cramers_rule
import gauss_jordan
import laplace_expansion
import matrix_inverse
from calculation_records import CalculationStep, DeterminantResult, InverseResult, Solution
from exact_rational import Rational
from matrix_primitives import format_matrix, format_number
from trace_verifier import ResultVerifier


METHODS = ("laplace", "gauss-jordan", "gaussian", "cramer", "inverse")


# ------------------------------ Input parsing --------------------------------
def _parse_entry(text: str) -> Rational:
    try:
        return Rational.parse(text, warn_on_approximation=True)
    except (ValueError, ZeroDivisionError) as e:
        raise ValueError(f"Invalid entry '{text}': {e}") from e


def _parse_vector(s: str) -> List[Rational]:
    """Parse "8,13" or "1/2, 0.25, -3" into a list of Rationals."""
    parts = [p.strip() for p in s.split(',')]
    if not parts or any(not p for p in parts):
        raise ValueError(f"Empty element in vector: '{s}'")
    return [_parse_entry(p) for p in parts]


def _parse_matrix(s: str) -> List[List[Rational]]:
    """Parse rows separated by semicolons, entries by commas: "2,1;1,3"."""
    rows = []
    for part in s.split(';'):
        part = part.strip()
        if not part:
            continue
        rows.append(_parse_vector(part))
    if not rows:
        raise ValueError("No rows found in input")
    width = len(rows[0])
    for i, row in enumerate(rows):
        if len(row) != width:
            raise ValueError(f"Row {i + 1} has {len(row)} entries, expected {width}")
    return rows


# ------------------------------- Orchestration -------------------------------
def run_calculation(
    method: str,
    matrix: List[List[Any]],
    constants: Optional[List[Any]] = None,
    exact: bool = True,
) -> Tuple[List[CalculationStep], Any]:
    """
    Dispatch one calculation.

    laplace and gauss-jordan compute a determinant when no constants are
    given and solve the system otherwise (Cramer's rule and Gauss-Jordan
    respectively); gaussian and cramer need constants; inverse takes none.

    Returns
    -------
    (steps, result) where result is a DeterminantResult, Solution or
    InverseResult
    """
    if method not in METHODS:
        raise ValueError(f"Unknown method '{method}'. Choose from: {', '.join(METHODS)}")

    if method == "inverse":
        if constants is not None:
            raise ValueError("The inverse method does not take constants")
        computation = matrix_inverse.calculate_inverse(matrix, exact=exact)
        return computation.steps, computation.result

    if constants is None:
        if method == "laplace":
            result = laplace_expansion.calculate_determinant(matrix, exact=exact)
        elif method == "gauss-jordan":
            result = gauss_jordan.calculate_determinant(matrix, exact=exact)
        else:
            raise ValueError(f"The {method} method needs --constants")
        return result.steps, result

    if method == "gauss-jordan":
        solved = gauss_jordan.solve(matrix, constants, exact=exact)
    elif method == "gaussian":
        solved = gauss_jordan.solve_by_gaussian_elimination(matrix, constants, exact=exact)
    else:
        solved = cramers_rule.solve_by_cramers_rule(matrix, constants, exact=exact)
    return solved.steps, solved.solution


def _latex(result: Any) -> str:
    def value(rational, decimal):
        return rational.to_sympy() if rational is not None else sp.Float(decimal)

    if isinstance(result, DeterminantResult):
        return sp.latex(value(result.rational_determinant, result.determinant))
    if isinstance(result, Solution):
        if not result.is_unique:
            return r"\text{%s}" % ("no solution" if result.has_no_solution else "infinitely many solutions")
        rational = result.rational_variables or [None] * len(result.variables)
        return sp.latex(sp.Matrix([value(r, d) for r, d in zip(rational, result.variables)]))
    if not result.is_invertible:
        return r"\text{singular}"
    if result.rational_inverse_matrix:
        return sp.latex(sp.Matrix([[v.to_sympy() for v in row] for row in result.rational_inverse_matrix]))
    return sp.latex(sp.Matrix(result.inverse_matrix))


def _summary(result: Any) -> str:
    if isinstance(result, DeterminantResult):
        shown = result.rational_determinant if result.rational_determinant is not None else result.determinant
        lines = [f"det = {format_number(shown)}"]
        if result.expansion_formula:
            lines.append(result.expansion_formula)
        return "\n".join(lines)
    if isinstance(result, Solution):
        if result.has_no_solution:
            return "The system has no solution"
        if result.has_infinite_solutions:
            return "The system has infinitely many solutions"
        values = result.rational_variables or result.variables
        return "\n".join(f"x{i + 1} = {format_number(v)}" for i, v in enumerate(values))
    if not result.is_invertible:
        return "The matrix is singular (det = 0) and has no inverse"
    rows = result.rational_inverse_matrix or result.inverse_matrix
    return "A^-1 =\n" + format_matrix(rows)


def _verify(matrix, constants, steps, result) -> dict:
    verifier = ResultVerifier()
    report = {'trace': verifier.check_trace(steps)}
    if isinstance(result, DeterminantResult):
        report['result'] = verifier.verify_determinant(matrix, result)
    elif isinstance(result, Solution):
        report['result'] = verifier.verify_solution(matrix, constants, result)
    elif isinstance(result, InverseResult):
        report['result'] = verifier.verify_inverse(matrix, result)
    report['is_valid'] = report['trace']['is_valid'] and report['result']['is_valid']
    return report


def main(argv: Optional[List[str]] = None) -> None:
    ap = argparse.ArgumentParser(description="Exact linear algebra with step-by-step traces.")
    ap.add_argument("--matrix", required=True, help='rows separated by ";", e.g. "2,1;1,3" (entries may be p/q)')
    ap.add_argument("--constants", default=None, help='right-hand side, e.g. "6,13"')
    ap.add_argument("--method", choices=METHODS, default="laplace")
    ap.add_argument("--decimal", action="store_true", help="use floating-point arithmetic instead of exact fractions")
    ap.add_argument("--out-prefix", default=None, help="write <prefix>.steps.json and <prefix>.meta.json")
    ap.add_argument("--latex", action="store_true", help="also write LaTeX of the result (<prefix>.tex)")
    ap.add_argument("--verify", action="store_true", help="cross-check the result with SymPy and NumPy")
    ap.add_argument("--quiet", action="store_true", help="print only the final result")
    args = ap.parse_args(argv)

    try:
        matrix = _parse_matrix(args.matrix)
    except ValueError as e:
        ap.error(f"Error parsing --matrix: {e}. Expected format: '2,1;1,3'")

    constants = None
    if args.constants is not None:
        try:
            constants = _parse_vector(args.constants)
        except ValueError as e:
            ap.error(f"Error parsing --constants: {e}. Expected format: '8,13'")

    if args.latex and not args.out_prefix:
        ap.error("--latex requires --out-prefix")

    exact = not args.decimal
    try:
        steps, result = run_calculation(args.method, matrix, constants, exact=exact)
    except ValueError as e:
        ap.error(str(e))

    if not args.quiet:
        for step in steps:
            print(f"[{step.id}] {step.title}")
            print(f"    {step.description}")
            if step.operation:
                print(f"    {step.operation}")
        print()
    print(_summary(result))

    report = None
    if args.verify:
        report = _verify(matrix, constants, steps, result)
        print("Verification: " + ("passed" if report['is_valid'] else "FAILED"))

    if args.out_prefix:
        out_dir = os.path.dirname(args.out_prefix)
        if out_dir:
            os.makedirs(out_dir, exist_ok=True)

        meta = {
            "method": args.method,
            "mode": "exact" if exact else "decimal",
            "matrix": [[str(v) for v in row] for row in matrix],
            "constants": None if constants is None else [str(v) for v in constants],
            "step_count": len(steps),
            "result": result.to_dict(),
        }
        if report is not None:
            meta["verification"] = {"is_valid": report['is_valid']}

        with open(f"{args.out_prefix}.steps.json", "w", encoding="utf-8") as f:
            json.dump([step.to_dict() for step in steps], f, indent=2, ensure_ascii=False)
        with open(f"{args.out_prefix}.meta.json", "w", encoding="utf-8") as f:
            json.dump(meta, f, indent=2, ensure_ascii=False)
        if args.latex:
            with open(f"{args.out_prefix}.tex", "w", encoding="utf-8") as f:
                f.write(_latex(result))


if __name__ == "__main__":
    main()
