"""
Unit tests for the command runner. These run real, harmless processes.
"""
import sys
from mcdock.RUNNERS.process_runner import CommandResult, CommandRunner


def test_success_exit_code():
    runner = CommandRunner("test")
    result = runner.run([sys.executable, "-c", "pass"])
    assert result.ok
    assert result.returncode == 0


def test_failure_exit_code():
    result = CommandRunner("test").run([sys.executable, "-c", "import sys; sys.exit(3)"])
    assert not result.ok
    assert result.returncode == 3


def test_launch_failure():
    result = CommandRunner("test").run(["mcdock-no-such-executable"])
    assert not result.ok
    assert result.returncode is None
    assert result.error


def test_captured_output():
    result = CommandRunner("test").run([sys.executable, "-c", "print('hello')"], inherit_streams=False)
    assert result.ok
    assert result.output.strip() == "hello"


def test_working_dir(tmp_path):
    script = "import os; print(os.getcwd())"
    result = CommandRunner("test").run([sys.executable, "-c", script],
                                       working_dir=str(tmp_path), inherit_streams=False)
    assert result.output.strip() == str(tmp_path.resolve())


def test_echoes_command(capsys):
    CommandRunner("docker").run([sys.executable, "-c", "pass"])
    assert "[docker] Running:" in capsys.readouterr().out


def test_result_ok_requires_zero():
    assert CommandResult(command=["x"], returncode=0).ok
    assert not CommandResult(command=["x"], returncode=1).ok
    assert not CommandResult(command=["x"], returncode=None).ok
