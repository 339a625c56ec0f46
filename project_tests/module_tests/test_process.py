"""
Module Install/Update Tests

Tests the git and pip commands built by the installer and updater.
Commands are captured by a fake runner, nothing is executed.
"""

import os
import subprocess
import sys
import tempfile
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from module_fixtures import make_module, make_repository
from module_manager import ModuleNotFound, ModuleProcessError, ModuleRequirementError
from module_manager.process import Installer, Updater
from module_manager.process.command import run_command
from module_manager.process.updater import format_requirement


class FakeRunner:
    """Stand-in for subprocess.run that records commands."""

    def __init__(self, returncode=0, stdout="", stderr="", raises=None):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.raises = raises
        self.commands = []
        self.kwargs = []

    def __call__(self, command, **kwargs):
        self.commands.append(command)
        self.kwargs.append(kwargs)
        if self.raises is not None:
            raise self.raises
        return subprocess.CompletedProcess(command, self.returncode, self.stdout, self.stderr)


def test_install_clone():
    """Test that a plain install clones into the module path."""
    print("📦 TESTING INSTALLER")
    print("-" * 50)

    with tempfile.TemporaryDirectory() as tmp:
        base = Path(tmp)
        repository = make_repository(base)
        runner = FakeRunner()

        destination = Installer(repository, runner).install("acme/blog")

        expected = os.path.join(str(base / "modules"), "Blog")
        assert destination == expected
        assert runner.commands == [
            ["git", "clone", "https://github.com/acme/blog.git", expected]
        ]
        assert runner.kwargs[0]["capture_output"] is True
        assert runner.kwargs[0]["text"] is True

    print("✅ git clone command built")


def test_install_subtree_and_explicit_path():
    """Test subtree installs and explicit destinations."""
    with tempfile.TemporaryDirectory() as tmp:
        base = Path(tmp)
        repository = make_repository(base, repository_url="git@example.test:{name}.git",
                                     branch="main")
        runner = FakeRunner()
        installer = Installer(repository, runner)

        destination = installer.install("acme/user-admin", "vendor/admin", subtree=True)

        assert destination == "vendor/admin"
        assert runner.commands == [[
            "git", "subtree", "add", "--prefix=vendor/admin",
            "git@example.test:acme/user-admin.git", "main", "--squash",
        ]]
        assert installer.get_destination_path("acme/user-admin") == \
            os.path.join(str(base / "modules"), "UserAdmin")

    print("✅ git subtree command built")


def test_install_failure():
    """Test that a failing git command raises ModuleProcessError."""
    with tempfile.TemporaryDirectory() as tmp:
        repository = make_repository(Path(tmp))
        runner = FakeRunner(returncode=128, stderr="fatal: repository not found\n")

        try:
            Installer(repository, runner).install("acme/missing")
            assert False, "install should raise when git fails"
        except ModuleProcessError as e:
            assert e.returncode == 128
            assert e.output == "fatal: repository not found"
            assert e.command[:2] == ["git", "clone"]
            assert "exit status 128" in str(e)

    print("✅ git failure reported")


def test_repository_install_and_update():
    """Test that the repository entry points run their commands through its runner."""
    with tempfile.TemporaryDirectory() as tmp:
        base = Path(tmp)
        make_module(base / "modules", "Shop", requires={"stripe": "5.0"})
        runner = FakeRunner()
        repository = make_repository(base, runner=runner)

        destination = repository.install("acme/blog")
        assert destination == repository.get_module_path("blog").rstrip(os.sep)

        installed = repository.update("shop")
        assert installed == ["stripe==5.0"]

        assert runner.commands == [
            ["git", "clone", "https://github.com/acme/blog.git", destination],
            [sys.executable, "-m", "pip", "install", "stripe==5.0"],
        ]

        repository.install("acme/blog", "vendor/blog", subtree=True)
        assert runner.commands[-1][:3] == ["git", "subtree", "add"]
        assert "--prefix=vendor/blog" in runner.commands[-1]

    print("✅ Repository install and update use the injected runner")


def test_format_requirement():
    """Test package/version pairs become pip requirements."""
    assert format_requirement("requests", "") == "requests"
    assert format_requirement("requests", None) == "requests"
    assert format_requirement("requests", "*") == "requests"
    assert format_requirement("requests", "2.31.0") == "requests==2.31.0"
    assert format_requirement("requests", ">=2.0") == "requests>=2.0"
    assert format_requirement("requests", "~=2.31") == "requests~=2.31"
    assert format_requirement("requests", "!=2.30,<3") == "requests!=2.30,<3"

    print("✅ Requirement formatting working")


def test_composer_style_constraints():
    """Test that tilde and caret constraints become valid pip specifiers."""
    assert format_requirement("pkg", "~2.1") == "pkg~=2.1"
    assert format_requirement("pkg", "~1.2.3") == "pkg~=1.2.3"
    assert format_requirement("pkg", "~3") == "pkg>=3,<4"
    assert format_requirement("pkg", "^1.0") == "pkg>=1.0,<2"
    assert format_requirement("pkg", "^1.2.3") == "pkg>=1.2.3,<2"
    assert format_requirement("pkg", "^0.3.1") == "pkg>=0.3.1,<0.4"
    assert format_requirement("pkg", "^0.0.3") == "pkg>=0.0.3,<0.0.4"

    for constraint in ("dev-master", "^1.x", "~", "latest"):
        try:
            format_requirement("pkg", constraint)
            assert False, f"{constraint!r} should be rejected"
        except ModuleRequirementError:
            pass

    print("✅ Composer-style constraints translated")


def test_update_rejects_unsupported_constraint():
    """Test that an untranslatable constraint fails before pip runs."""
    with tempfile.TemporaryDirectory() as tmp:
        base = Path(tmp)
        make_module(base / "modules", "Blog", requires={"good": "^2.0", "bad": "dev-master"})
        runner = FakeRunner()
        repository = make_repository(base, runner=runner)

        try:
            repository.update("blog")
            assert False, "update should reject dev-master"
        except ModuleRequirementError as e:
            assert "dev-master" in str(e)

        assert runner.commands == []

    print("✅ Unsupported constraints rejected")


def test_update_installs_requirements():
    """Test that update runs one pip install per declared requirement."""
    print("\n🔄 TESTING UPDATER")
    print("-" * 50)

    with tempfile.TemporaryDirectory() as tmp:
        base = Path(tmp)
        make_module(base / "modules", "Blog", requires={"markdown": ">=3.0", "bleach": "*"})
        make_module(base / "modules", "Shop", requires=["stripe>=5", "pyyaml"])
        repository = make_repository(base)
        runner = FakeRunner()

        installed = Updater(repository, runner).update("blog")

        assert installed == ["markdown>=3.0", "bleach"]
        assert runner.commands == [
            [sys.executable, "-m", "pip", "install", "markdown>=3.0"],
            [sys.executable, "-m", "pip", "install", "bleach"],
        ]

        assert Updater(repository, FakeRunner()).update("SHOP") == ["stripe>=5", "pyyaml"]

    print("✅ pip install commands built")


def test_update_without_requirements():
    """Test that modules with no requirements run nothing."""
    with tempfile.TemporaryDirectory() as tmp:
        base = Path(tmp)
        make_module(base / "modules", "Plain")
        repository = make_repository(base)
        runner = FakeRunner()

        assert Updater(repository, runner).update("plain") == []
        assert runner.commands == []

        try:
            Updater(repository, runner).update("missing")
            assert False, "update should raise for a missing module"
        except ModuleNotFound as e:
            assert e.name == "missing"

        try:
            repository.update("missing")
            assert False, "update should raise for a missing module"
        except ModuleNotFound:
            pass

    print("✅ Empty and missing modules handled")


def test_update_stops_on_failure():
    """Test that the first failing pip install aborts the update."""
    with tempfile.TemporaryDirectory() as tmp:
        base = Path(tmp)
        make_module(base / "modules", "Blog", requires={"first": "1.0", "second": "2.0"})
        repository = make_repository(base)
        runner = FakeRunner(returncode=1, stdout="No matching distribution")

        try:
            Updater(repository, runner).update("Blog")
            assert False, "update should raise when pip fails"
        except ModuleProcessError as e:
            assert e.output == "No matching distribution"

        assert len(runner.commands) == 1

    print("✅ pip failure reported")


def test_run_command_errors():
    """Test that runner exceptions are wrapped in ModuleProcessError."""
    timeout = FakeRunner(raises=subprocess.TimeoutExpired(["git"], 1))
    try:
        run_command(["git", "status"], timeout)
        assert False, "run_command should raise on timeout"
    except ModuleProcessError as e:
        assert e.returncode is None
        assert "timed out" in str(e)

    missing = FakeRunner(raises=FileNotFoundError("git"))
    try:
        run_command(["git", "status"], missing)
        assert False, "run_command should raise when the executable is missing"
    except ModuleProcessError as e:
        assert e.returncode is None

    assert run_command(["echo"], FakeRunner(stdout="  done\n")) == "done"

    print("✅ Runner errors wrapped")


if __name__ == '__main__':
    test_install_clone()
    test_install_subtree_and_explicit_path()
    test_install_failure()
    test_repository_install_and_update()
    test_format_requirement()
    test_composer_style_constraints()
    test_update_rejects_unsupported_constraint()
    test_update_installs_requirements()
    test_update_without_requirements()
    test_update_stops_on_failure()
    test_run_command_errors()
    print("\n✅ All install/update tests passed!")
