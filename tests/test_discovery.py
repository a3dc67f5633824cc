"""Unit tests for test class discovery."""

from sheetrunner.execution.discovery import TestDiscovery


class TestTestDiscovery:
    """Test cases for TestDiscovery."""

    def test_discover_top_level_classes(self, project_dir):
        discovery = TestDiscovery(project_dir / "ui_tests")

        classes = discovery.discover()

        assert [c.name for c in classes] == ["LoginTest", "CartTest"]
        login = classes[0]
        assert login.module == "ui_tests.suites.test_login"
        assert login.qualified_name == "ui_tests.suites.test_login.LoginTest"
        assert login.node_id == "ui_tests/suites/test_login.py::LoginTest"

    def test_breadth_first_and_skipped_dirs(self, tmp_path):
        root = tmp_path / "ui_tests"
        (root / "deep" / "deeper").mkdir(parents=True)
        (root / "__pycache__").mkdir()
        (root / ".hidden").mkdir()
        (root / "deep" / "deeper" / "test_c.py").write_text("class Deepest:\n    pass\n")
        (root / "deep" / "test_b.py").write_text("class Deep:\n    pass\n")
        (root / "test_a.py").write_text("class Top:\n    class Inner:\n        pass\n")
        (root / "__pycache__" / "test_x.py").write_text("class Cached:\n    pass\n")
        (root / ".hidden" / "test_y.py").write_text("class Hidden:\n    pass\n")

        names = [c.name for c in TestDiscovery(root).discover()]

        assert names == ["Top", "Deep", "Deepest"]

    def test_syntax_errors_are_skipped(self, tmp_path):
        root = tmp_path / "ui_tests"
        root.mkdir()
        (root / "broken.py").write_text("class Broken(:\n")
        (root / "good.py").write_text("class Good:\n    pass\n")

        assert [c.name for c in TestDiscovery(root).discover()] == ["Good"]

    def test_missing_root(self, tmp_path):
        assert TestDiscovery(tmp_path / "absent").discover() == []

    def test_package_init_module_name(self, tmp_path):
        root = tmp_path / "ui_tests"
        (root / "pkg").mkdir(parents=True)
        (root / "pkg" / "__init__.py").write_text("class FromInit:\n    pass\n")

        found = TestDiscovery(root).discover()[0]

        assert found.qualified_name == "ui_tests.pkg.FromInit"

    def test_resolve_by_simple_name_ignoring_case(self, project_dir):
        discovery = TestDiscovery(project_dir / "ui_tests")

        assert discovery.resolve("carttest").name == "CartTest"

    def test_resolve_by_dotted_suffix(self, project_dir):
        discovery = TestDiscovery(project_dir / "ui_tests")

        found = discovery.resolve("suites.test_login.LoginTest")

        assert found.qualified_name == "ui_tests.suites.test_login.LoginTest"

    def test_resolve_unknown_or_blank(self, project_dir):
        discovery = TestDiscovery(project_dir / "ui_tests")

        assert discovery.resolve("Nope") is None
        assert discovery.resolve("  ") is None

    def test_discover_is_cached(self, project_dir):
        discovery = TestDiscovery(project_dir / "ui_tests")
        first = discovery.discover()
        (project_dir / "ui_tests" / "test_new.py").write_text("class New:\n    pass\n")

        assert discovery.discover() is first
