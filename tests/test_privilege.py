import subprocess
from pathlib import Path

import pytest

from hostswitch.blocker import privilege
from hostswitch.blocker.privilege import PrivilegedCommandError, SudoRunner


class Recorder:
    def __init__(self, returncode=0, stderr=""):
        self.returncode = returncode
        self.stderr = stderr
        self.argvs = []

    def __call__(self, argv, capture_output, text):
        self.argvs.append(argv)
        return subprocess.CompletedProcess(argv, self.returncode, stdout="", stderr=self.stderr)


def test_install_goes_through_temp_file_and_rename(monkeypatch):
    rec = Recorder()
    monkeypatch.setattr(privilege.subprocess, "run", rec)

    SudoRunner().install(Path("/profiles/SAFE.hosts"), Path("/etc/hosts"))

    install, move = rec.argvs
    assert install == [
        "sudo", "/usr/bin/install", "-m", "644", "-o", "root", "-g", privilege.ROOT_GROUP,
        "/profiles/SAFE.hosts", "/etc/.hosts.hostswitch.tmp",
    ]
    assert move == ["sudo", "mv", "-f", "/etc/.hosts.hostswitch.tmp", "/etc/hosts"]


def test_validate_and_copy_commands(monkeypatch):
    rec = Recorder()
    monkeypatch.setattr(privilege.subprocess, "run", rec)
    runner = SudoRunner()

    runner.validate()
    runner.copy(Path("/etc/hosts"), Path("/etc/hosts.bak"))

    assert rec.argvs == [["sudo", "-v"], ["sudo", "cp", "-p", "/etc/hosts", "/etc/hosts.bak"]]


def test_failure_carries_stderr(monkeypatch):
    monkeypatch.setattr(privilege.subprocess, "run", Recorder(returncode=1, stderr="sudo: a password is required\n"))

    with pytest.raises(PrivilegedCommandError) as exc:
        SudoRunner().validate()

    assert str(exc.value) == "sudo: a password is required"
    assert exc.value.returncode == 1


def test_missing_sudo_binary(monkeypatch):
    def missing(argv, capture_output, text):
        raise FileNotFoundError(2, "No such file or directory", argv[0])

    monkeypatch.setattr(privilege.subprocess, "run", missing)

    with pytest.raises(PrivilegedCommandError):
        SudoRunner(sudo="no-such-sudo").validate()


def test_failed_rename_removes_temp_file(monkeypatch):
    argvs = []

    def run(argv, capture_output, text):
        argvs.append(argv)
        rc = 1 if argv[1] == "mv" else 0
        return subprocess.CompletedProcess(argv, rc, stdout="", stderr="mv: rename failed" if rc else "")

    monkeypatch.setattr(privilege.subprocess, "run", run)

    with pytest.raises(PrivilegedCommandError, match="rename failed"):
        SudoRunner().install(Path("/profiles/SAFE.hosts"), Path("/etc/hosts"))

    assert argvs[-1] == ["sudo", "rm", "-f", "/etc/.hosts.hostswitch.tmp"]
