"""Quick regression tests for the evolutionary N-Queens pipeline."""

from pathlib import Path
import contextlib
import io
import sys
import unittest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from evoqueens.analysis import cli


class QuickRegressionTests(unittest.TestCase):
    """Verify that the lightweight regression checks pass."""

    def test_solver_runs_and_csv_generation(self):
        """Ensure the headless GA, the solver engine and CSV export succeed for N=8."""
        output = io.StringIO()
        with contextlib.redirect_stdout(output):
            cli.run_quick_regression_tests()
        self.assertIn("Quick regression tests passed.", output.getvalue())

    def test_cli_flag(self):
        with contextlib.redirect_stdout(io.StringIO()):
            cli.main(["--quick-test"])


if __name__ == "__main__":
    unittest.main()
