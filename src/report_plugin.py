"""pytest plugin: per-test StepReporter, group tags and the results/HTML writers.

Results are gathered from test reports on the controlling process, so it works
the same with or without xdist workers.
"""
from datetime import datetime, timezone
from pathlib import Path

import pytest

from report_writer import write_html_report, write_results_json
from run_suite import TRACE_MODES, VIDEO_MODES, group_for_path
from step_reporter import StepReporter


GROUP_TAGS = ("group", "category", "priority")


def pytest_addoption(parser):
    group = parser.getgroup("medical-report", "medical e2e reporting")
    group.addoption("--results-dir", default="test-results", help="Directory for attachments outside any test group")
    group.addoption("--results-json", default=None, help="Write collected results to this JSON file")
    group.addoption("--html-report", default=None, help="Write an HTML report to this file")
    group.addoption("--video", default="retain-on-failure", choices=VIDEO_MODES, help="Browser video recording")
    group.addoption("--tracing", default="on-first-retry", choices=TRACE_MODES, help="Playwright trace recording")


def pytest_configure(config):
    if hasattr(config, "workerinput"):
        return
    json_path = config.getoption("--results-json")
    html_path = config.getoption("--html-report")
    if json_path or html_path:
        config.pluginmanager.register(
            SuiteResults(Path(json_path) if json_path else None, Path(html_path) if html_path else None),
            "medical-suite-results",
        )


def pytest_collection_modifyitems(config, items):
    for item in items:
        group = group_for_path(item.path)
        if group:
            item.user_properties.extend([
                ("group", group.name),
                ("category", group.category),
                ("priority", group.priority),
            ])


@pytest.hookimpl(tryfirst=True, hookwrapper=True)
def pytest_runtest_makereport(item, call):
    outcome = yield
    rep = outcome.get_result()
    setattr(item, f"rep_{rep.when}", rep)


def attachment_dir(node, results_dir) -> Path:
    group = group_for_path(node.path)
    if group:
        return Path(group.output_dir)
    return Path(results_dir) / "attachments"


def attempt_number(node) -> int:
    # pytest-rerunfailures counts runs on the item, starting at 1
    return getattr(node, "execution_count", None) or 1


def run_failed(node) -> bool:
    return any(getattr(getattr(node, f"rep_{when}", None), "failed", False) for when in ("setup", "call"))


def records_video(mode: str) -> bool:
    return mode != "off"


def keeps_video(mode: str, failed: bool) -> bool:
    return mode == "on" or (mode == "retain-on-failure" and failed)


def records_trace(mode: str, attempt: int) -> bool:
    if mode == "on-first-retry":
        return attempt == 2
    return mode in ("on", "retain-on-failure")


def keeps_trace(mode: str, failed: bool) -> bool:
    return mode != "retain-on-failure" or failed


@pytest.fixture
def reporter(request) -> StepReporter:
    output_dir = attachment_dir(request.node, request.config.getoption("--results-dir"))
    return StepReporter(
        request.node.user_properties,
        output_dir,
        test_name=request.node.name,
        attempt=attempt_number(request.node),
    )


class SuiteResults:
    def __init__(self, json_path: Path | None, html_path: Path | None):
        self.json_path = json_path
        self.html_path = html_path
        self.started_at = datetime.now(timezone.utc).isoformat()
        self.tests: dict[str, dict] = {}

    def entry(self, report) -> dict:
        return self.tests.setdefault(report.nodeid, {
            "name": report.nodeid.split("::")[-1],
            "nodeid": report.nodeid,
            "status": "unknown",
            "error": "",
            "duration": 0.0,
            "retries": 0,
            "attachments": [],
        })

    def pytest_runtest_logreport(self, report):
        entry = self.entry(report)
        entry["duration"] += report.duration
        # user_properties only grows, the latest report carries everything
        entry["attachments"] = [value for key, value in report.user_properties if key == "attachment"]
        for key, value in report.user_properties:
            if key in GROUP_TAGS:
                entry[key] = value
        if report.outcome == "rerun":
            entry["retries"] += 1
            return
        if report.when == "call":
            entry["status"] = report.outcome
        elif report.failed:
            entry["status"] = "failed"
        elif report.skipped and report.when == "setup":
            entry["status"] = "skipped"
        if report.failed:
            entry["error"] = report.longreprtext
        elif report.skipped and report.when == "setup" and isinstance(report.longrepr, tuple):
            entry["error"] = str(report.longrepr[2])

    def results(self) -> dict:
        return {
            "startedAt": self.started_at,
            "finishedAt": datetime.now(timezone.utc).isoformat(),
            "tests": list(self.tests.values()),
        }

    def pytest_sessionfinish(self, session, exitstatus):
        results = self.results()
        if self.json_path:
            write_results_json(results, self.json_path)
        if self.html_path:
            write_html_report(results, self.html_path)
