import os
from dataclasses import replace

import pytest
from playwright.async_api import async_playwright

from medical_config import load_config, env_flag
from report_plugin import attempt_number, keeps_trace, keeps_video, records_trace, records_video, run_failed


pytest_plugins = ["report_plugin"]


def pytest_addoption(parser):
    parser.addoption("--run-e2e", action="store_true", default=False, help="Run the live-site e2e tests")
    parser.addoption(
        "--browser-engine",
        default=os.environ.get("E2E_BROWSER", "chromium"),
        help="Comma separated browser engines: chromium, firefox, webkit",
    )
    parser.addoption("--headful", action="store_true", default=False, help="Run browser headful for debugging")
    parser.addoption("--base-url", default=None, help="Application URL (overrides MEDICAL_APP_URL)")


def pytest_collection_modifyitems(config, items):
    if config.getoption("--run-e2e") or env_flag(os.environ.get("RUN_E2E")):
        return
    skip_e2e = pytest.mark.skip(reason="live-site e2e test; pass --run-e2e or set RUN_E2E=1")
    for item in items:
        if "e2e" in item.keywords:
            item.add_marker(skip_e2e)


def pytest_generate_tests(metafunc):
    if "browser_name" in metafunc.fixturenames:
        engines = [e.strip() for e in metafunc.config.getoption("--browser-engine").split(",") if e.strip()]
        metafunc.parametrize("browser_name", engines or ["chromium"], scope="function")


@pytest.fixture(scope="session")
def config(pytestconfig):
    cfg = load_config()
    base_url = pytestconfig.getoption("--base-url")
    if base_url:
        cfg = replace(cfg, base_url=base_url)
    return cfg


@pytest.fixture
def headless(pytestconfig) -> bool:
    if pytestconfig.getoption("--headful"):
        return False
    return os.environ.get("HEADLESS", "true").lower() != "false"


@pytest.fixture
async def browser(browser_name, headless, config):
    async with async_playwright() as p:
        engine = getattr(p, browser_name)
        args = ["--no-sandbox", "--disable-dev-shm-usage"] if (config.ci and browser_name == "chromium") else []
        browser = await engine.launch(headless=headless, args=args)
        yield browser
        await browser.close()


@pytest.fixture
async def context(browser, config, request, reporter):
    video_mode = request.config.getoption("--video")
    trace_mode = request.config.getoption("--tracing")
    options = {}
    if records_video(video_mode):
        options["record_video_dir"] = str(reporter.output_dir / "videos-raw")
        options["record_video_size"] = dict(config.viewport)
    context = await browser.new_context(
        base_url=config.base_url,
        viewport=dict(config.viewport),
        ignore_https_errors=True,
        **options,
    )
    context.set_default_timeout(config.action_timeout)
    context.set_default_navigation_timeout(config.navigation_timeout)
    tracing = records_trace(trace_mode, attempt_number(request.node))
    if tracing:
        await context.tracing.start(screenshots=True, snapshots=True, sources=True)
    yield context
    if tracing:
        if keeps_trace(trace_mode, run_failed(request.node)):
            trace_path = reporter.next_path("TRACE", extension="zip")
            trace_path.parent.mkdir(parents=True, exist_ok=True)
            await context.tracing.stop(path=str(trace_path))
            reporter.attach_file("TRACE", trace_path, "application/zip")
        else:
            await context.tracing.stop()
    await context.close()


@pytest.fixture
async def page(context, request, reporter):
    page = await context.new_page()
    yield page
    failed = run_failed(request.node)
    if failed:
        await reporter.attach_screenshot(page, "FAILURE - full page", full_page=True)
    video = page.video
    await page.close()
    if video is not None:
        if keeps_video(request.config.getoption("--video"), failed):
            await reporter.attach_video(video, "VIDEO")
        else:
            await video.delete()
