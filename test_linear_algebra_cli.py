"""
Tests for the command line front end
"""

import json
import warnings

import numpy as np
import pytest

from calculation_records import DeterminantResult, InverseResult, Solution
from exact_rational import Rational
from linear_algebra_cli import _parse_matrix, _parse_vector, main, run_calculation


class TestParsing:
    """Matrix and vector literals"""

    def test_parse_matrix(self):
        assert _parse_matrix("2,1;1,3") == [[Rational(2), Rational(1)], [Rational(1), Rational(3)]]

    def test_parse_fractions_and_decimals(self):
        assert _parse_vector("1/2, 0.25, -3") == [Rational(1, 2), Rational(1, 4), Rational(-3)]

    def test_trailing_semicolon(self):
        assert _parse_matrix("1,2;3,4;") == _parse_matrix("1,2;3,4")

    def test_ragged_rows(self):
        with pytest.raises(ValueError, match="Row 2 has 1 entries"):
            _parse_matrix("1,2;3")

    def test_empty_element(self):
        with pytest.raises(ValueError, match="Empty element"):
            _parse_vector("1,,2")

    def test_bad_entry(self):
        with pytest.raises(ValueError, match="Invalid entry 'x'"):
            _parse_vector("1,x")

    def test_zero_denominator_entry(self):
        with pytest.raises(ValueError, match="Invalid entry '1/0'"):
            _parse_vector("1/0")

    def test_lossy_decimal_warns(self):
        with pytest.warns(UserWarning, match="approximated as"):
            entries = _parse_vector("0.12345, 2")
        assert entries[0].denominator <= 10000
        assert entries[1] == Rational(2)

    def test_exact_decimal_is_silent(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            assert _parse_vector("0.1, 1/3") == [Rational(1, 10), Rational(1, 3)]


class TestRunCalculation:
    """Method dispatch"""

    def test_laplace_determinant(self):
        steps, result = run_calculation("laplace", [[5, -2, 4], [6, 7, -3], [3, 0, 2]])
        assert isinstance(result, DeterminantResult)
        assert result.rational_determinant == 28
        assert steps[0].id == 1

    def test_gauss_jordan_determinant(self):
        _, result = run_calculation("gauss-jordan", [[0, 1], [1, 0]])
        assert result.rational_determinant == -1
        assert result.swap_count == 1

    def test_laplace_with_constants_uses_cramer(self):
        steps, result = run_calculation("laplace", [[2, 1], [1, 3]], [6, 13])
        assert isinstance(result, Solution)
        assert result.rational_variables == [1, 4]
        assert steps[1].title.startswith("Main determinant - ")

    @pytest.mark.parametrize("method", ["gauss-jordan", "gaussian", "cramer"])
    def test_solve_methods(self, method):
        _, result = run_calculation(method, [[2, 1], [1, 3]], [8, 13])
        assert result.rational_variables == [Rational(11, 5), Rational(18, 5)]

    def test_inverse(self):
        _, result = run_calculation("inverse", [[1, 2], [3, 4]], exact=False)
        assert isinstance(result, InverseResult)
        np.testing.assert_allclose(result.inverse_matrix, [[-2.0, 1.0], [1.5, -0.5]])

    def test_gaussian_needs_constants(self):
        with pytest.raises(ValueError, match="needs --constants"):
            run_calculation("gaussian", [[1]])

    def test_inverse_rejects_constants(self):
        with pytest.raises(ValueError, match="does not take constants"):
            run_calculation("inverse", [[1]], [1])

    def test_unknown_method(self):
        with pytest.raises(ValueError, match="Unknown method"):
            run_calculation("lu", [[1]])


class TestMain:
    """End-to-end runs of main()"""

    def test_prints_trace_and_result(self, capsys):
        main(["--matrix", "5,-2,4;6,7,-3;3,0,2"])
        out = capsys.readouterr().out
        assert "[1] Original matrix" in out
        assert "det = 28" in out

    def test_quiet(self, capsys):
        main(["--matrix", "2,1;1,3", "--constants", "6,13", "--method", "gaussian", "--quiet"])
        out = capsys.readouterr().out
        assert out.strip().splitlines() == ["x1 = 1", "x2 = 4"]

    def test_inverse_summary_rows(self, capsys):
        main(["--matrix", "1,2;3,4", "--method", "inverse", "--quiet"])
        assert capsys.readouterr().out.strip().splitlines() == ["A^-1 =", "[-2, 1]", "[3/2, -1/2]"]

    def test_decimal_inverse_summary_rows(self, capsys):
        main(["--matrix", "1,2;3,4", "--method", "inverse", "--decimal", "--quiet"])
        assert capsys.readouterr().out.strip().splitlines() == ["A^-1 =", "[-2, 1]", "[1.5, -0.5]"]

    def test_verify_flag(self, capsys):
        main(["--matrix", "1,2;3,4", "--method", "inverse", "--verify", "--quiet"])
        assert "Verification: passed" in capsys.readouterr().out

    def test_singular_message(self, capsys):
        main(["--matrix", "1,2;2,4", "--constants", "3,7", "--method", "cramer", "--quiet"])
        assert "no solution" in capsys.readouterr().out

    def test_writes_outputs(self, tmp_path, capsys):
        prefix = tmp_path / "out" / "inv"
        main([
            "--matrix", "1,2;3,4", "--method", "inverse",
            "--out-prefix", str(prefix), "--latex", "--quiet",
        ])
        steps = json.loads((tmp_path / "out" / "inv.steps.json").read_text(encoding="utf-8"))
        meta = json.loads((tmp_path / "out" / "inv.meta.json").read_text(encoding="utf-8"))
        tex = (tmp_path / "out" / "inv.tex").read_text(encoding="utf-8")
        assert steps[0]["id"] == 1
        assert steps[0]["rational_matrix"] == [["1", "2"], ["3", "4"]]
        assert meta["method"] == "inverse"
        assert meta["mode"] == "exact"
        assert meta["step_count"] == len(steps)
        assert meta["result"]["rational_inverse_matrix"] == [["-2", "1"], ["3/2", "-1/2"]]
        assert r"\frac{3}{2}" in tex

    def test_decimal_meta(self, tmp_path, capsys):
        prefix = tmp_path / "det"
        main(["--matrix", "1/2,1;1,4", "--decimal", "--out-prefix", str(prefix), "--quiet"])
        meta = json.loads((tmp_path / "det.meta.json").read_text(encoding="utf-8"))
        assert meta["mode"] == "decimal"
        assert meta["matrix"] == [["1/2", "1"], ["1", "4"]]
        assert meta["result"]["determinant"] == pytest.approx(1.0)

    def test_parse_error_exits(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main(["--matrix", "1,a;2,3"])
        assert excinfo.value.code == 2
        assert "Error parsing --matrix" in capsys.readouterr().err

    def test_latex_requires_prefix(self, capsys):
        with pytest.raises(SystemExit):
            main(["--matrix", "1", "--latex"])

    def test_shape_error_exits(self, capsys):
        with pytest.raises(SystemExit):
            main(["--matrix", "1,2", "--constants", "1", "--method", "gaussian"])
        assert "must be square" in capsys.readouterr().err
