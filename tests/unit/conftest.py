import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError


class FakeKeyboard:
    def __init__(self, calls):
        self.calls = calls

    async def press(self, key):
        self.calls.append(("press", key))


class FakeContext:
    def __init__(self):
        self.cookies_cleared = 0

    async def clear_cookies(self):
        self.cookies_cleared += 1


class FakePage:
    """Just enough of the Playwright page API for offline checks."""

    def __init__(
        self,
        visible=(),
        url="about:blank",
        texts=None,
        html_lang=None,
        click_errors=None,
        script_click_result=True,
        evaluate_result=None,
        eval_results=None,
        screenshot_error=None,
        missing=(),
        broken_checks=(),
    ):
        self.visible = set(visible)
        self.url = url
        self.texts = dict(texts or {})
        self.html_lang = html_lang
        self.click_errors = dict(click_errors or {})
        self.script_click_result = script_click_result
        self.evaluate_result = evaluate_result
        self.eval_results = dict(eval_results or {})
        self.screenshot_error = screenshot_error
        self.missing = set(missing)
        self.broken_checks = set(broken_checks)
        self.calls = []
        self.checks = []
        self.values = {}
        self.keyboard = FakeKeyboard(self.calls)
        self.context = FakeContext()

    async def is_visible(self, selector):
        self.checks.append(selector)
        if selector in self.broken_checks:
            raise RuntimeError(f"visibility check failed for {selector}")
        return selector in self.visible

    async def is_enabled(self, selector):
        return selector in self.visible

    async def click(self, selector, timeout=None, force=False):
        strategy = "forced" if force else "plain"
        self.calls.append(("click", selector, strategy))
        error = self.click_errors.get(strategy)
        if error:
            raise error

    async def evaluate(self, script, arg=None):
        if arg is not None:
            self.calls.append(("click", arg, "script"))
            error = self.click_errors.get("script")
            if error:
                raise error
            return self.script_click_result
        self.calls.append(("evaluate",))
        return self.evaluate_result

    async def eval_on_selector_all(self, selector, script):
        return self.eval_results.get(selector, [])

    async def fill(self, selector, value, timeout=None):
        self.calls.append(("fill", selector, value))
        self.values[selector] = value

    async def select_option(self, selector, value):
        self.calls.append(("select", selector, value))
        self.values[selector] = value

    async def check(self, selector):
        self.calls.append(("check", selector))

    async def input_value(self, selector):
        return self.values.get(selector, "")

    async def goto(self, url, **kwargs):
        self.calls.append(("goto", url))
        self.url = url

    async def wait_for_selector(self, selector, state=None, timeout=None):
        self.calls.append(("wait", selector, state))
        if selector in self.missing:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for {selector}")

    async def wait_for_timeout(self, ms):
        self.calls.append(("sleep", ms))

    async def wait_for_load_state(self, state=None, timeout=None):
        self.calls.append(("load", state))

    async def text_content(self, selector, timeout=None):
        if selector not in self.texts:
            if selector == "body":
                return ""
            raise PlaywrightTimeoutError(f"no element for {selector}")
        return self.texts[selector]

    async def get_attribute(self, selector, name):
        return self.html_lang

    async def screenshot(self, full_page=False):
        self.calls.append(("screenshot", full_page))
        if self.screenshot_error:
            raise self.screenshot_error
        return b"\x89PNG\r\n\x1a\nfake"


@pytest.fixture
def make_page():
    return FakePage
