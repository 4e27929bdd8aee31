#!/usr/bin/env python3

import argparse
import json
import sys
from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path

import pytest

from medical_config import TestConfig, load_config
from report_writer import archive_files, attachment_paths, log_to_csv, summarize


BROWSERS = ("chromium", "firefox", "webkit")
RESULTS_DIR = "test-results"
VIDEO_MODES = ("off", "on", "retain-on-failure")
TRACE_MODES = ("off", "on", "on-first-retry", "retain-on-failure")


@dataclass(frozen=True)
class TestGroup:
    __test__ = False

    name: str
    test_dir: str
    output_dir: str
    category: str
    priority: str


@dataclass(frozen=True)
class RunnerConfig:
    workers: str | int = "auto"
    retries: int = 0
    browsers: tuple = ("chromium",)
    strict: bool = False
    test_timeout: int = 120
    video: str = "retain-on-failure"
    trace: str = "on-first-retry"
    output_dir: str = RESULTS_DIR
    results_json: str = f"{RESULTS_DIR}/test-results.json"
    junit_xml: str = f"{RESULTS_DIR}/test-results.xml"
    html_report: str = "playwright-report/index.html"


def build_test_groups(config: TestConfig) -> dict[str, TestGroup]:
    paths = config.screenshot_paths
    groups = [
        TestGroup("ai-workflows", "tests/e2e/ai_case_processing", paths["ai_workflow"], "ai-processing", "high"),
        TestGroup("patient-registration", "tests/e2e/medical", paths["patient_registration"], "registration", "critical"),
        TestGroup("multilingual", "tests/e2e/multilingual", paths["multilingual"], "localization", "medium"),
        TestGroup("security", "tests/e2e/security", paths["security"], "security", "high"),
    ]
    return {g.name: g for g in groups}


TEST_GROUPS = build_test_groups(TestConfig())


def group_for_path(path, groups: dict[str, TestGroup] = TEST_GROUPS) -> TestGroup | None:
    posix = "/" + Path(path).as_posix().lstrip("/")
    for group in groups.values():
        if f"/{group.test_dir}/" in posix:
            return group
    return None


def build_runner_config(config: TestConfig) -> RunnerConfig:
    """CI runs one worker with two retries and strict markers; local runs fan out."""
    if config.ci:
        return RunnerConfig(workers=1, retries=2, strict=True, test_timeout=config.timeout // 1000)
    return RunnerConfig(workers="auto", retries=0, strict=False, test_timeout=config.timeout // 1000)


def build_pytest_args(
    runner: RunnerConfig,
    groups: list[str] | None = None,
    browsers: list[str] | None = None,
    headful: bool = False,
    base_url: str | None = None,
    extra: list[str] | None = None,
) -> list[str]:
    selected = [TEST_GROUPS[g] for g in groups] if groups else list(TEST_GROUPS.values())
    args = [g.test_dir for g in selected]
    args += ["--run-e2e", "--browser-engine", ",".join(browsers or runner.browsers)]
    if str(runner.workers) not in ("0", "1"):
        args += ["-n", str(runner.workers)]
    if runner.retries:
        args += ["--reruns", str(runner.retries)]
    args += ["--timeout", str(runner.test_timeout)]
    args += ["--video", runner.video, "--tracing", runner.trace]
    args += ["--junitxml", runner.junit_xml, "-o", "junit_suite_name=medical-e2e"]
    args += ["--results-json", runner.results_json, "--html-report", runner.html_report]
    args += ["--results-dir", runner.output_dir]
    if runner.strict:
        args.append("--strict-markers")
    if headful:
        args.append("--headful")
    if base_url:
        args += ["--base-url", base_url]
    return args + list(extra or [])


def load_results(path: Path) -> dict:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except Exception:
        return {"tests": []}


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="CURA medical E2E suite runner")
    parser.add_argument("--group", action="append", choices=sorted(TEST_GROUPS), help="Test group to run (repeatable)")
    parser.add_argument("--browser", action="append", choices=BROWSERS, help="Browser engine (repeatable)")
    parser.add_argument("--headful", action="store_true", help="Run browser headful for debugging")
    parser.add_argument("--base-url", help="Application URL (overrides MEDICAL_APP_URL)")
    parser.add_argument("--workers", help="Parallel workers, e.g. 4 or auto")
    parser.add_argument("--retries", type=int, help="Retries for failed tests")
    parser.add_argument("--no-archive", action="store_true", help="Skip the zip archive of report files")

    args, passthrough = parser.parse_known_args(argv)

    config = load_config()
    runner = build_runner_config(config)
    if args.workers is not None:
        runner = replace(runner, workers=args.workers)
    if args.retries is not None:
        runner = replace(runner, retries=args.retries)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    output_dir = Path(runner.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    pytest_args = build_pytest_args(
        runner,
        groups=args.group,
        browsers=args.browser,
        headful=args.headful,
        base_url=args.base_url,
        extra=passthrough,
    )
    print(f"🏃 Running tests with Playwright (ci={config.ci}, workers={runner.workers}, retries={runner.retries})...")
    exit_code = int(pytest.main(pytest_args))

    results_path = Path(runner.results_json)
    junit_path = Path(runner.junit_xml)
    report_path = Path(runner.html_report)
    artifacts = {"results": results_path, "junit": junit_path, "report": report_path}
    print(f"📊 Results written: {results_path}")
    print(f"🧾 JUnit XML: {junit_path}")
    print(f"📝 HTML report: {report_path}")

    results = load_results(results_path)
    if not args.no_archive:
        archive_path = output_dir / f"archive_{timestamp}.zip"
        # keep relative layout so the report's attachment links resolve inside the zip
        archive_files(archive_path, [results_path, junit_path, report_path, *attachment_paths(results)], root=Path.cwd())
        artifacts["archive"] = archive_path
        print(f"📦 Archive: {archive_path}")

    counts = summarize(results)
    log_to_csv(output_dir / "run_log.csv", timestamp, artifacts, counts)

    if counts["total"]:
        print(f"✅ Done. Total: {counts['total']}, Passed: {counts['passed']}, Failed: {counts['failed']}, Skipped: {counts['skipped']}")
    else:
        print("✅ Done. No tests executed.")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
