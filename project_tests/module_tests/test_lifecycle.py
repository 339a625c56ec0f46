"""
Module Lifecycle Tests

Tests the two-phase register/boot lifecycle:
- Hooks run in priority order, only for enabled modules
- Every module registers before any module boots
- A failing register hook stops the pass
- Providers and boot files are loaded from module directories
- The bundled Greeter module starts inside the application
"""

import sys
import tempfile
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from module_fixtures import (
    FAILING_PROVIDER,
    RECORDING_PROVIDER,
    RecordingApp,
    make_module,
    make_repository,
)
from module_manager import ModuleLoadError, ModuleProvider

PROJECT_ROOT = Path(__file__).parent.parent.parent


def test_register_then_boot_in_priority_order():
    """Test that all registers complete, in order, before any boot."""
    print("🚀 TESTING LIFECYCLE ORDER")
    print("-" * 50)

    with tempfile.TemporaryDirectory() as tmp:
        base = Path(tmp)
        root = base / "modules"
        make_module(root, "Core", RECORDING_PROVIDER, status=True, priority=100)
        make_module(root, "Blog", RECORDING_PROVIDER, status=True, priority=10)
        make_module(root, "Shop", RECORDING_PROVIDER, status=True, priority=50)
        make_module(root, "Disabled", RECORDING_PROVIDER, status=False, priority=1000)

        app = RecordingApp()
        repository = make_repository(base, app=app)

        repository.register()
        repository.boot()

        assert app.names("register") == ["Core", "Shop", "Blog"]
        assert app.names("boot") == ["Core", "Shop", "Blog"]
        assert app.phases() == ["register"] * 3 + ["boot"] * 3
        assert "Disabled" not in app.names("register")

    print("✅ Two-phase lifecycle in priority order")


def test_register_failure_halts_pass():
    """Test that a failing register hook stops later modules from registering."""
    print("\n💥 TESTING FAIL-FAST")
    print("-" * 50)

    with tempfile.TemporaryDirectory() as tmp:
        base = Path(tmp)
        root = base / "modules"
        make_module(root, "First", RECORDING_PROVIDER, status=True, priority=30)
        make_module(root, "Broken", FAILING_PROVIDER, status=True, priority=20)
        make_module(root, "Last", RECORDING_PROVIDER, status=True, priority=10)

        app = RecordingApp()
        repository = make_repository(base, app=app)

        try:
            repository.register()
            assert False, "register should propagate the hook failure"
        except RuntimeError as e:
            assert "Broken" in str(e)

        assert app.names("register") == ["First", "Broken"]
        assert "Last" not in app.names("register")
        assert app.names("boot") == []

    print("✅ Hook failure propagates and halts the pass")


def test_module_without_providers():
    """Test that modules without providers register and boot as no-ops."""
    with tempfile.TemporaryDirectory() as tmp:
        base = Path(tmp)
        make_module(base / "modules", "Plain", status=True)

        app = RecordingApp()
        repository = make_repository(base, app=app)
        repository.register()
        repository.boot()

        assert app.calls == []

    print("✅ Provider-less modules are no-ops")


def test_provider_loading():
    """Test explicit and implicit provider class selection."""
    with tempfile.TemporaryDirectory() as tmp:
        base = Path(tmp)
        module_dir = make_module(
            base / "modules", "Blog", RECORDING_PROVIDER, status=True,
            providers=["provider.py", "provider.py:RecordingProvider"],
        )

        app = RecordingApp()
        repository = make_repository(base, app=app)
        module = repository.find("blog")
        providers = module.get_providers()

        assert len(providers) == 2
        assert all(isinstance(provider, ModuleProvider) for provider in providers)
        assert providers[0].app is app
        assert providers[0].module is module
        # Loaded once per descriptor
        assert module.get_providers() is providers

        module.register()
        assert app.names("register") == ["Blog", "Blog"]

        assert (module_dir / "provider.py").exists()

    print("✅ Providers loaded from module directory")


def test_provider_load_errors():
    """Test that missing files and classes raise ModuleLoadError."""
    with tempfile.TemporaryDirectory() as tmp:
        base = Path(tmp)
        root = base / "modules"
        make_module(root, "MissingFile", status=True, providers=["nope.py"])
        make_module(root, "MissingClass", RECORDING_PROVIDER, status=True,
                    providers=["provider.py:Nope"])
        make_module(root, "SyntaxError", "def broken(:\n", status=True)

        repository = make_repository(base, app=RecordingApp())

        for name in ("MissingFile", "MissingClass", "SyntaxError"):
            try:
                repository.find(name).register()
                assert False, f"{name} should fail to load"
            except ModuleLoadError as e:
                assert name in str(e)

    print("✅ Load errors reported as ModuleLoadError")


def test_boot_files_run_after_providers():
    """Test that boot files execute with app and module globals."""
    with tempfile.TemporaryDirectory() as tmp:
        base = Path(tmp)
        module_dir = make_module(base / "modules", "Blog", RECORDING_PROVIDER,
                                 status=True, files=["start.py"])
        (module_dir / "start.py").write_text(
            'app.calls.append(("file", module.get_name()))\n', encoding="utf-8"
        )

        app = RecordingApp()
        repository = make_repository(base, app=app)
        repository.register()
        repository.boot()

        assert app.calls == [("register", "Blog"), ("boot", "Blog"), ("file", "Blog")]

    print("✅ Boot files executed")


def test_bundled_greeter_module():
    """Test that the Greeter module shipped in modules/ starts in the application."""
    print("\n👋 TESTING BUNDLED MODULE")
    print("-" * 50)

    from modular_app import Application

    app = Application()
    app.modules.path = str(PROJECT_ROOT / "modules")

    assert app.modules.has("Greeter")
    assert app.modules.find("greeter").enabled()

    app.start()

    assert app.bound("greeter")
    assert app.make("greeter").greet("World") == "Hello, World!"

    print("✅ Greeter module registered and booted")


if __name__ == '__main__':
    test_register_then_boot_in_priority_order()
    test_register_failure_halts_pass()
    test_module_without_providers()
    test_provider_loading()
    test_provider_load_errors()
    test_boot_files_run_after_providers()
    test_bundled_greeter_module()
    print("\n✅ All lifecycle tests passed!")
