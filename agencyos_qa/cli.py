#!/usr/bin/env python3
"""AgencyOS QA CLI.

Command-line interface for UI scenario runs and Supabase checks.

Usage:
    agencyos-qa list                        # List registered scenarios
    agencyos-qa run admin-login             # Run one or more scenarios
    agencyos-qa run --file flow.json        # Run a scenario from JSON
    agencyos-qa tables                      # Check expected tables exist
    agencyos-qa seed-users                  # Recreate the demo accounts
    agencyos-qa seed-knowledge              # Insert sample collections
    agencyos-qa storage-check [BUCKET]      # Upload/resolve/delete round trip
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
from typing import Any, Coroutine

from agencyos_qa.config import (
    DEFAULT_ACCOUNT_EMAILS,
    DEFAULT_BASE_URL,
    DEFAULT_ENV_FILE,
    DEFAULT_TIMEOUT,
    SHARED_PASSWORD_VAR,
    ConfigurationError,
    RunnerConfig,
    load_accounts,
    load_backend_settings,
    load_environment,
    parse_viewport,
)
from agencyos_qa.backend import (
    DEFAULT_ATTACHMENTS_BUCKET,
    EXPECTED_TABLES,
    BackendInspector,
    create_admin_client,
    demo_users,
)
from agencyos_qa.testing.execution import PlaywrightExecutor
from agencyos_qa.testing.models import RunReport, StepStatus, TestScenario
from agencyos_qa.testing.scenarios import SCENARIOS, build_scenario
from agencyos_qa.testing.utils import StepTimeoutError, ValidationError, get_logger, wait_for_app

EXIT_OK = 0
EXIT_FAILED = 1


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    # Backend modules log under agencyos_qa.backend.*
    get_logger("backend", level)
    for name, logger in logging.Logger.manager.loggerDict.items():
        if name.startswith("agencyos_qa.") and isinstance(logger, logging.Logger):
            logger.setLevel(level)


def _run_async(coro: Coroutine) -> Any:
    """
    Run a coroutine, cancelling it on SIGINT/SIGTERM.

    Cancellation propagates through the executor, so browser and
    fixture teardown still run before the process exits.
    """
    async def guarded():
        loop = asyncio.get_running_loop()
        task = asyncio.current_task()
        installed = []
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, task.cancel)
                installed.append(sig)
            except (NotImplementedError, RuntimeError):
                # Not supported on this platform / not the main thread
                pass
        try:
            return await coro
        finally:
            for sig in installed:
                loop.remove_signal_handler(sig)

    return asyncio.run(guarded())


def connect_backend(env_file):
    """Load credentials and wrap a service-role client."""
    settings = load_backend_settings(env_file)
    return settings, BackendInspector(create_admin_client(settings))


def print_report(report: RunReport) -> None:
    """Print a one-line-per-result summary."""
    print()
    print("=" * 50)
    print("AgencyOS QA Summary")
    print("=" * 50)

    for result in report.scenario_results:
        marker = "✅" if result.passed else "❌"
        print(f"{marker} {result.scenario_name} "
              f"({result.passed_steps} passed, {result.failed_steps} failed, "
              f"{result.skipped_steps} skipped)")
        for step in result.step_results:
            if step.failed:
                print(f"     ❌ {step.label}: {step.error or step.message}")
            elif step.status == StepStatus.WARNED:
                print(f"     ⚠️  {step.label}: {step.message}")
        if result.error and not result.step_results:
            print(f"     {result.error}")
        for message in result.console_errors:
            print(f"     ⚠️  console: {message}")

    for outcome in report.outcomes:
        marker = "✅" if outcome.ok else "❌"
        detail = f" - {outcome.detail}" if outcome.detail else ""
        print(f"{marker} {outcome.label}{detail}")

    print()
    print(f"Total: {report.total}   Failures: {report.failures}")


def _finish(report: RunReport, args) -> int:
    print_report(report)
    if getattr(args, "report", None):
        report.save(args.report)
        print(f"Report saved to {args.report}")
    return report.exit_code


# =============================================================================
# COMMANDS
# =============================================================================

def cmd_list(args) -> int:
    """List registered scenarios."""
    print("Available scenarios:")
    for name in sorted(SCENARIOS):
        print(f"  - {name}")
    return EXIT_OK


def build_runner_config(args) -> RunnerConfig:
    """Map `run` flags onto a RunnerConfig."""
    viewport = parse_viewport(args.viewport) if args.viewport else None
    return RunnerConfig(
        base_url=args.base_url,
        headless=not args.headful,
        slow_mo_ms=args.slow_mo,
        viewport=viewport,
        device=args.device,
        default_timeout=args.timeout,
        continue_on_error=args.continue_on_error,
        output_dir=args.output_dir,
    )


def collect_scenarios(args) -> list[TestScenario]:
    """Named scenarios first, then any loaded from JSON files."""
    scenarios = []
    if args.names:
        env = load_environment(args.env_file)
        accounts = load_accounts(env)
        for name in args.names:
            scenarios.append(build_scenario(name, accounts))
    for path in args.file or []:
        scenarios.append(TestScenario.load(path))
    return scenarios


def cmd_run(args) -> int:
    """Run UI scenarios in a fresh browser each."""
    try:
        config = build_runner_config(args)
        scenarios = collect_scenarios(args)
    except KeyError as e:
        print(f"❌ {e.args[0]}")
        return EXIT_FAILED
    except (ValidationError, ValueError, OSError) as e:
        print(f"❌ {e}")
        return EXIT_FAILED

    if not scenarios:
        print("❌ Nothing to run: pass scenario names or --file")
        return EXIT_FAILED

    async def run_all():
        if args.wait_for_app:
            print(f"Waiting for {config.base_url} ...")
            await wait_for_app(config.base_url, timeout=args.wait_for_app)
        return await PlaywrightExecutor(config).run_all(scenarios)

    try:
        results = _run_async(run_all())
    except asyncio.CancelledError:
        print("⚠️  Interrupted, browser and fixtures cleaned up")
        return EXIT_FAILED
    except StepTimeoutError as e:
        print(f"❌ {e}")
        return EXIT_FAILED

    report = RunReport(base_url=config.base_url)
    for result in results:
        report.add_scenario(result)
    return _finish(report, args)


def cmd_tables(args) -> int:
    """Check the tables the application expects."""
    _, inspector = connect_backend(args.env_file)
    report = RunReport()
    report.extend_outcomes(inspector.check_tables(args.names or EXPECTED_TABLES))
    return _finish(report, args)


def cmd_seed_users(args) -> int:
    """Delete and recreate the demo accounts."""
    settings, inspector = connect_backend(args.env_file)
    if not settings.demo_password:
        raise ConfigurationError(f"Missing {SHARED_PASSWORD_VAR}: the demo accounts need a password")

    report = RunReport()
    report.extend_outcomes(inspector.seed_users(demo_users(settings.demo_password)))
    return _finish(report, args)


def cmd_seed_knowledge(args) -> int:
    """Insert sample knowledge collections owned by the admin profile."""
    _, inspector = connect_backend(args.env_file)
    report = RunReport()
    report.extend_outcomes(inspector.seed_knowledge_collections(args.owner))
    return _finish(report, args)


def cmd_storage_check(args) -> int:
    """Verify a bucket exists and accepts an upload/delete round trip."""
    _, inspector = connect_backend(args.env_file)
    report = RunReport()

    bucket = inspector.bucket_exists(args.bucket)
    report.add_outcome(bucket)
    if bucket.ok:
        report.add_outcome(inspector.verify_storage_policy(
            args.bucket,
            args.payload,
            prefix=args.prefix,
            fetch_public_url=args.fetch,
        ))
    return _finish(report, args)


# =============================================================================
# ENTRY POINT
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="agencyos-qa",
        description="AgencyOS QA - UI scenarios and Supabase checks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    agencyos-qa run admin-login client-role-restriction
    agencyos-qa run admin-dashboard --viewport tablet --report out.json
    agencyos-qa run knowledge-hub --headful --slow-mo 250
    agencyos-qa storage-check chat-attachments --fetch
        """,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Shared flags
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--env-file", default=DEFAULT_ENV_FILE,
                        help=f"dotenv file with credentials (default: {DEFAULT_ENV_FILE})")
    common.add_argument("--report", help="Write a JSON report to this path")

    # List
    subparsers.add_parser("list", help="List registered scenarios")

    # Run
    run_p = subparsers.add_parser("run", parents=[common], help="Run UI scenarios")
    run_p.add_argument("names", nargs="*", help="Scenario names (see `list`)")
    run_p.add_argument("-f", "--file", action="append", help="Scenario JSON file (repeatable)")
    run_p.add_argument("--base-url", default=DEFAULT_BASE_URL,
                       help=f"Application URL (default: {DEFAULT_BASE_URL})")
    run_p.add_argument("--headful", action="store_true", help="Show the browser window")
    run_p.add_argument("--slow-mo", type=int, default=0, help="Delay between actions (ms)")
    view = run_p.add_mutually_exclusive_group()
    view.add_argument("--viewport", help="Preset name or WIDTHxHEIGHT")
    view.add_argument("--device", help="Playwright device profile, e.g. 'iPhone 13'")
    run_p.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT,
                       help=f"Wait ceiling per step in seconds (default: {DEFAULT_TIMEOUT})")
    run_p.add_argument("--continue-on-error", action="store_true",
                       help="Keep running steps after a failure")
    run_p.add_argument("--output-dir", help="Directory for screenshots")
    run_p.add_argument("--wait-for-app", type=float, metavar="SECONDS",
                       help="Wait up to SECONDS for the app to respond before running")

    # Tables
    tables_p = subparsers.add_parser("tables", parents=[common], help="Check tables exist")
    tables_p.add_argument("names", nargs="*", help="Table names (default: the expected set)")

    # Seeding
    subparsers.add_parser("seed-users", parents=[common], help="Recreate demo accounts")
    knowledge_p = subparsers.add_parser("seed-knowledge", parents=[common],
                                        help="Insert sample knowledge collections")
    knowledge_p.add_argument("--owner", default=DEFAULT_ACCOUNT_EMAILS["admin"],
                             help="Email of the owning profile")

    # Storage
    storage_p = subparsers.add_parser("storage-check", parents=[common],
                                      help="Storage upload/delete round trip")
    storage_p.add_argument("bucket", nargs="?", default=DEFAULT_ATTACHMENTS_BUCKET,
                           help=f"Bucket name (default: {DEFAULT_ATTACHMENTS_BUCKET})")
    storage_p.add_argument("--prefix", default="test", help="Folder for the test object")
    storage_p.add_argument("--payload", default="agencyos-qa storage check",
                           help="Literal content to upload")
    storage_p.add_argument("--fetch", action="store_true",
                           help="Also GET the public URL (public buckets only)")

    return parser


COMMANDS = {
    "list": cmd_list,
    "run": cmd_run,
    "tables": cmd_tables,
    "seed-users": cmd_seed_users,
    "seed-knowledge": cmd_seed_knowledge,
    "storage-check": cmd_storage_check,
}


def main(argv=None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_FAILED

    _configure_logging(args.verbose)

    try:
        return COMMANDS[args.command](args)
    except ConfigurationError as e:
        print(f"❌ Configuration error: {e}")
        return EXIT_FAILED
    except Exception as e:
        logging.getLogger(__name__).exception(f"Unhandled error in '{args.command}'")
        print(f"❌ {type(e).__name__}: {e}")
        return EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
