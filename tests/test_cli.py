"""
CLI Tests
"""
import json

from functest.cli import main

PASSING_FILE = """
from functest import ExecContext, case, request, test

case("cli", [test("passes", request({"url": "x"}, mock=1), {"data": 1})], ExecContext())
"""

FAILING_FILE = """
from functest import ExecContext, case, request, test

case("cli", [test("fails", request({"url": "x"}, mock=1), {"data": 2})], ExecContext())
"""


class TestCli:
    """Test the run command."""

    def test_run_prints_stats(self, write_test_file, tmp_path, capsys):
        path = write_test_file("ok.py", PASSING_FILE)
        log_file = tmp_path / "func.log"

        code = main(["run", str(path), "--no-report", "--log-file", str(log_file)])

        stats = json.loads(capsys.readouterr().out)
        assert code == 0
        assert stats["passes"] == 1
        assert stats["duration"].endswith("ms")
        assert "Running test: cli passes" in log_file.read_text()

    def test_failures_exit_nonzero(self, write_test_file, tmp_path, capsys):
        path = write_test_file("bad.py", FAILING_FILE)

        code = main(["run", str(path), "--parallel", "--report-dir", str(tmp_path / "reports")])

        stats = json.loads(capsys.readouterr().out)
        assert code == 1
        assert stats["failures"] == 1
        assert list((tmp_path / "reports").glob("*/bad/report.json"))

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "run" in capsys.readouterr().out
