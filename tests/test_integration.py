"""End-to-end runs against real shell-script binaries and toolchains."""
from __future__ import annotations

from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path
import io
import os
import signal
import stat
import subprocess
import sys
import tempfile
import textwrap
import time
import unittest

from brabble_launcher import cli


def _write_executable(path: Path, body: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("#!/bin/sh\n" + textwrap.dedent(body).lstrip())
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


@unittest.skipIf(os.name != "posix", "shell-script binaries need a POSIX shell")
class LauncherIntegrationTests(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.workdir = Path(self.temp_dir.name)
        self.artifact = self.workdir / "bin" / "brabble"
        self.build_log = self.workdir / "build.log"
        self.toolchain = self.workdir / "tools" / "fake-go"
        # Mimics `go build -o <out> <pkg>`: $3 is the output path.
        _write_executable(
            self.toolchain,
            f"""
            echo "$@" >> '{self.build_log}'
            out="$3"
            mkdir -p "$(dirname "$out")"
            printf '#!/bin/sh\\necho "  Brabble v0.1.0  "\\nexit 0\\n' > "$out"
            chmod +x "$out"
            """,
        )

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def _configure(self, toolchain: str) -> None:
        (self.workdir / "brabble-launcher.toml").write_text(
            f'[launcher]\nlog_level = "none"\n\n[build]\ntoolchain = "{toolchain}"\n'
        )

    def _run(self, args) -> tuple[int, str, str]:
        stdout = io.StringIO()
        stderr = io.StringIO()
        with redirect_stdout(stdout), redirect_stderr(stderr):
            code = cli.run(args, workdir=self.workdir, environ={})
        return code, stdout.getvalue(), stderr.getvalue()

    def test_builds_once_then_reuses_binary(self) -> None:
        self._configure(str(self.toolchain))
        first, _, _ = self._run(["status"])
        second, _, _ = self._run(["status"])
        self.assertEqual((first, second), (0, 0))
        self.assertTrue(self.artifact.exists())
        entries = self.build_log.read_text().splitlines()
        self.assertEqual(entries, [f"build -o {self.artifact} ./cmd/brabble"])

    def test_version_output_is_trimmed(self) -> None:
        self._configure(str(self.toolchain))
        code, stdout, _ = self._run(["--version"])
        self.assertEqual(code, 0)
        self.assertEqual(stdout, "Brabble v0.1.0\n")

    def test_delegate_exit_code_propagates(self) -> None:
        self._configure(str(self.toolchain))
        _write_executable(self.artifact, 'exit "$2"\n')
        for code in (0, 1, 2, 127):
            with self.subTest(code=code):
                result, _, _ = self._run(["exit-with", str(code)])
                self.assertEqual(result, code)
        self.assertFalse(self.build_log.exists())

    def test_failing_toolchain_stops_launch(self) -> None:
        failing = self.workdir / "tools" / "broken-go"
        _write_executable(failing, "exit 2\n")
        self._configure(str(failing))
        code, _, stderr = self._run([])
        self.assertEqual(code, 1)
        self.assertIn("Error: build failed with exit code 2", stderr)
        self.assertFalse(self.artifact.exists())

    def test_missing_toolchain_is_reported(self) -> None:
        self._configure(str(self.workdir / "tools" / "no-such-go"))
        code, _, stderr = self._run(["status"])
        self.assertEqual(code, 1)
        self.assertIn("Error: could not start build toolchain", stderr)

    def test_non_executable_binary_is_a_spawn_failure(self) -> None:
        self._configure(str(self.toolchain))
        self.artifact.parent.mkdir(parents=True)
        self.artifact.write_text("not a program")
        self.artifact.chmod(0o644)
        code, _, stderr = self._run(["status"])
        self.assertEqual(code, 1)
        self.assertIn("Error: could not run", stderr)


@unittest.skipIf(os.name != "posix", "process groups and shell traps need POSIX")
class InterruptTests(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.workdir = Path(self.temp_dir.name)
        self.ready = self.workdir / "ready"
        self.cleaned_up = self.workdir / "cleaned-up"
        _write_executable(
            self.workdir / "bin" / "brabble",
            f"""
            trap 'sleep 1; touch "{self.cleaned_up}"; exit 0' INT TERM
            touch "{self.ready}"
            while true; do sleep 1; done
            """,
        )

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def test_ctrl_c_lets_serve_finish_its_shutdown(self) -> None:
        script = Path(__file__).resolve().parent.parent / "brabble.py"
        env = {key: value for key, value in os.environ.items() if not key.startswith("BRABBLE_")}
        launcher = subprocess.Popen(
            [sys.executable, str(script)],
            cwd=self.workdir,
            env=env,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
        try:
            deadline = time.monotonic() + 15
            while not self.ready.exists():
                self.assertIsNone(launcher.poll(), "launcher exited before the delegate started")
                self.assertLess(time.monotonic(), deadline, "delegate never started")
                time.sleep(0.05)

            # Terminal Ctrl-C: SIGINT to the whole foreground process group.
            os.killpg(launcher.pid, signal.SIGINT)
            code = launcher.wait(timeout=15)
        finally:
            if launcher.poll() is None:
                os.killpg(launcher.pid, signal.SIGKILL)
                launcher.wait()

        self.assertTrue(self.cleaned_up.exists())
        self.assertEqual(code, 0)


if __name__ == "__main__":
    unittest.main()
