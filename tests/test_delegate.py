from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock
import io
import unittest

from brabble_launcher.console import Console
from brabble_launcher.delegate import DelegateOutcome, IOMode, ProcessDelegate
from core.command_runner import RecordingCommandRunner, ScriptedResult


class ProcessDelegateTests(unittest.TestCase):
    def setUp(self) -> None:
        self.artifact = Path("/work/bin/brabble")
        self.console = Console(level="none", stream=io.StringIO())

    def _delegate(self, runner) -> ProcessDelegate:
        return ProcessDelegate(artifact=self.artifact, runner=runner, console=self.console)

    def test_inherited_mode_streams_exact_arguments(self) -> None:
        runner = RecordingCommandRunner()
        outcome = self._delegate(runner).spawn(("status", "--json"))
        record = runner.commands[0]
        self.assertEqual(record.command, [str(self.artifact), "status", "--json"])
        self.assertTrue(record.stream)
        self.assertEqual(outcome, DelegateOutcome(exit_code=0))

    def test_captured_mode_returns_output(self) -> None:
        runner = RecordingCommandRunner([ScriptedResult(stdout="Brabble v0.1.0\n", stderr="")])
        outcome = self._delegate(runner).spawn(["--version"], IOMode.CAPTURED)
        self.assertFalse(runner.commands[0].stream)
        self.assertEqual(outcome.stdout, "Brabble v0.1.0\n")
        self.assertTrue(outcome.succeeded)

    def test_exit_codes_are_normal_outcomes(self) -> None:
        for code in (0, 1, 2, 127):
            with self.subTest(code=code):
                runner = RecordingCommandRunner([ScriptedResult(returncode=code)])
                outcome = self._delegate(runner).spawn(["status"])
                self.assertTrue(outcome.spawned)
                self.assertEqual(outcome.exit_code, code)
                self.assertEqual(outcome.launcher_exit_code(), code)

    def test_signal_termination_has_no_exit_code(self) -> None:
        runner = RecordingCommandRunner([ScriptedResult(returncode=-15)])
        outcome = self._delegate(runner).spawn(["serve"])
        self.assertIsNone(outcome.exit_code)
        self.assertEqual(outcome.signal, 15)
        self.assertEqual(outcome.launcher_exit_code(), 0)
        self.assertFalse(outcome.succeeded)

    def test_spawn_failure_is_distinct_from_exit(self) -> None:
        runner = MagicMock()
        runner.run.side_effect = PermissionError(13, "Permission denied")
        outcome = self._delegate(runner).spawn(["serve"])
        self.assertFalse(outcome.spawned)
        self.assertIsNone(outcome.exit_code)
        self.assertIn(str(self.artifact), outcome.spawn_error)
        self.assertIn("Permission denied", outcome.spawn_error)

    def test_arguments_are_not_modified(self) -> None:
        runner = RecordingCommandRunner()
        args = ["test-hook", "make it so", "--", "-v"]
        self._delegate(runner).spawn(args)
        self.assertEqual(runner.commands[0].command[1:], args)


if __name__ == "__main__":
    unittest.main()
