"""
Main CLI interface for SheetRunner.

Provides commands to run the scheduled suites, preview the run plan, list
discoverable test classes, validate the configuration and scaffold a new
project.
"""

import argparse
import os
import sys
import traceback
import uuid
from importlib.metadata import PackageNotFoundError, version as package_version
from pathlib import Path
from typing import List, Optional

from openpyxl import Workbook

from .app import SheetRunnerApp
from .core.config import CONFIG_FILE_NAME, load_config
from .core.exceptions import SheetRunnerError, ValidationError
from .core.logging_config import setup_logging


def _load(args: argparse.Namespace):
    config = load_config(getattr(args, "config", None))
    if getattr(args, "headless", False):
        config.headless_mode = True
    return config


def cmd_run(args: argparse.Namespace) -> int:
    """Run the suites scheduled in the Run Manager."""
    try:
        print("🚀 Starting SheetRunner...")
        config = _load(args)
        run_id = str(uuid.uuid4())
        setup_logging(config, run_id)

        app = SheetRunnerApp(config, run_id=run_id)
        result = app.run(sheet=args.sheet, send_email=not args.no_email)

        outcomes = result.outcomes
        if not outcomes:
            print("⚠️  No tests were executed")
            return 1

        passed = sum(1 for o in outcomes if o.passed)
        print(f"📊 {passed}/{len(outcomes)} tests passed")
        for outcome in outcomes:
            icon = "✅" if outcome.passed else "❌"
            print(f"   {icon} {outcome.suite}/{outcome.name}: {outcome.status.value} "
                  f"({outcome.attempts} attempt(s))")
        if app.report_file:
            print(f"📄 Report: {app.report_file}")
        return 0 if result.success else 1

    except SheetRunnerError as e:
        print(f"❌ SheetRunner error: {e.message}")
        if args.verbose:
            traceback.print_exc()
        return 1
    except Exception as e:
        print(f"❌ Unexpected error: {e}")
        if args.verbose:
            traceback.print_exc()
        return 1


def cmd_plan(args: argparse.Namespace) -> int:
    """Print the suites a run would execute."""
    try:
        config = _load(args)
        suites = SheetRunnerApp(config).plan(args.sheet)
        if not suites:
            print("⚠️  No executable suites found")
            return 1

        for suite in suites:
            print(f"📦 {suite.name} (threads: {suite.thread_count})")
            for key, value in suite.parameters.items():
                print(f"   {key} = {value}")
            for test in suite.tests:
                print(f"   • {test.name} [{test.browser}] -> {test.target}")
        return 0
    except SheetRunnerError as e:
        print(f"❌ {e.message}")
        return 1


def cmd_discover(args: argparse.Namespace) -> int:
    """List test classes under the tests root."""
    try:
        config = _load(args)
        classes = SheetRunnerApp(config).discovery().discover()
        if not classes:
            print(f"⚠️  No test classes found under {config.tests_root}")
            return 1
        print(f"🔍 {len(classes)} class(es) under {config.tests_root}:")
        for found in classes:
            print(f"   • {found.qualified_name}  ({found.node_id})")
        return 0
    except SheetRunnerError as e:
        print(f"❌ {e.message}")
        return 1


def cmd_validate(args: argparse.Namespace) -> int:
    """Validate configuration and the files it references."""
    try:
        config = _load(args)
        print(f"🔍 Validating {config.config_path}")
        config.validate()
        print("✅ Configuration is valid")
        return 0
    except ValidationError as e:
        print(f"❌ {len(e.violations)} Error(s) found:")
        for violation in e.violations:
            print(f"   • {violation}")
        return 1
    except SheetRunnerError as e:
        print(f"❌ {e.message}")
        return 1


def cmd_version(args: argparse.Namespace) -> int:
    """Show version information."""
    try:
        current = package_version("sheetrunner")
    except PackageNotFoundError:
        current = "development"

    print(f"SheetRunner {current}")
    if args.verbose:
        print()
        print("System Information:")
        print(f"  Python: {sys.version}")
        print(f"  Platform: {sys.platform}")
        print(f"  Working Directory: {os.getcwd()}")
    return 0


CONFIG_TEMPLATE = """# SheetRunner environment configuration
application_url: https://www.saucedemo.com/
test_data_source: excel
external_sheet_path: TestData.xlsx
run_manager_path: RunManager.xlsx
run_configuration: Regression
tests_root: ui_tests
report_path: reports
report_file_name: summaryReport.html
retry_count: 1
headless: false
log_level: INFO
csv_log_path: logs/results.csv

email:
  enabled: false
  smtp_host: smtp.gmail.com
  smtp_port: 587
  use_tls: true
  username: your-account@example.com
  password: your-app-password
  password_b64: false
  sender: your-account@example.com
  recipients:
    - qa-team@example.com

insights:
  enabled: false
  model: gpt-4o-mini
"""


def _write_workbook(path: Path, sheets) -> None:
    workbook = Workbook()
    workbook.remove(workbook.active)
    for title, rows in sheets:
        sheet = workbook.create_sheet(title=title)
        for row in rows:
            sheet.append(row)
    workbook.save(path)


def cmd_init(args: argparse.Namespace) -> int:
    """Scaffold configuration and template workbooks."""
    try:
        print("🚀 Initializing SheetRunner...")
        current_dir = Path.cwd()

        for dir_name in ("ui_tests", "reports", "logs"):
            dir_path = current_dir / dir_name
            if not dir_path.exists():
                dir_path.mkdir(parents=True)
                print(f"   ✅ Created directory: {dir_path}")
            else:
                print(f"   ℹ️  Directory already exists: {dir_path}")

        config_file = current_dir / CONFIG_FILE_NAME
        if not config_file.exists():
            config_file.write_text(CONFIG_TEMPLATE, encoding="utf-8")
            print(f"   ✅ Created file: {config_file}")
        else:
            print(f"   ℹ️  File already exists: {config_file}")

        run_manager = current_dir / "RunManager.xlsx"
        if not run_manager.exists():
            _write_workbook(
                run_manager,
                [
                    (
                        "Regression",
                        [
                            ["Testcase ID", "Description", "Suite Name", "Browser", "ExecutionStatus"],
                            ["DemoTestCase1", "Add two items to the cart", "Smoke", "chrome", "Yes"],
                            ["DemoTestCase2", "Add one item to the cart", "Smoke", "firefox", "Yes"],
                        ],
                    ),
                    (
                        "ParallelExecution",
                        [
                            ["SuiteName", "ThreadCount", "FolderLoc", "SuiteTestName"],
                            ["Smoke", "2", "", "Smoke Tests"],
                        ],
                    ),
                ],
            )
            print(f"   ✅ Created workbook: {run_manager}")

        test_data = current_dir / "TestData.xlsx"
        if not test_data.exists():
            _write_workbook(
                test_data,
                [
                    (
                        "TestData",
                        [
                            ["TestCaseId", "Username", "Password"],
                            ["DemoTestCase1", "standard_user", "secret_sauce"],
                        ],
                    )
                ],
            )
            print(f"   ✅ Created workbook: {test_data}")

        print()
        print("✅ SheetRunner initialization complete!")
        print()
        print("Next steps:")
        print(f"1. Edit {CONFIG_FILE_NAME} with your application URL and SMTP account")
        print("2. Add UITest classes under ui_tests/")
        print("3. Schedule them in RunManager.xlsx")
        print("4. Run 'sheetrunner validate', then 'sheetrunner run'")
        return 0

    except OSError as e:
        print(f"❌ Initialization failed: {e}")
        return 1


def create_main_parser() -> argparse.ArgumentParser:
    """Create main CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="sheetrunner",
        description="SheetRunner - spreadsheet-driven Playwright UI test runner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  sheetrunner init
  sheetrunner validate
  sheetrunner plan --sheet Regression
  sheetrunner run --headless
  sheetrunner version --verbose
        """,
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose output"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    def add_config_arg(sub):
        sub.add_argument("--config", "-c", help=f"Path to {CONFIG_FILE_NAME}")

    run_parser = subparsers.add_parser("run", help="Run the scheduled suites")
    add_config_arg(run_parser)
    run_parser.add_argument("--sheet", help="Run sheet to read (default from config)")
    run_parser.add_argument("--no-email", action="store_true", help="Do not send the report email")
    run_parser.add_argument("--headless", action="store_true", help="Force headless browsers")
    run_parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose output")
    run_parser.set_defaults(func=cmd_run)

    plan_parser = subparsers.add_parser("plan", help="Show the suites a run would execute")
    add_config_arg(plan_parser)
    plan_parser.add_argument("--sheet", help="Run sheet to read (default from config)")
    plan_parser.set_defaults(func=cmd_plan)

    discover_parser = subparsers.add_parser("discover", help="List test classes")
    add_config_arg(discover_parser)
    discover_parser.set_defaults(func=cmd_discover)

    validate_parser = subparsers.add_parser("validate", help="Validate configuration")
    add_config_arg(validate_parser)
    validate_parser.set_defaults(func=cmd_validate)

    init_parser = subparsers.add_parser("init", help="Initialize SheetRunner in current directory")
    init_parser.set_defaults(func=cmd_init)

    version_parser = subparsers.add_parser("version", help="Show version information")
    version_parser.add_argument(
        "--verbose", "-v", action="store_true", help="Show detailed version information"
    )
    version_parser.set_defaults(func=cmd_version)

    return parser


def main(args: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_main_parser()
    if args is None:
        args = sys.argv[1:]

    parsed_args = parser.parse_args(args)
    if not hasattr(parsed_args, "func"):
        parser.print_help()
        return 1
    return parsed_args.func(parsed_args)


if __name__ == "__main__":
    sys.exit(main())
