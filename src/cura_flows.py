"""CURA appointment flows shared by the e2e scenarios.

Every optional element is located through candidate lists, so a missing
field is a failed verification rather than an exception. Navigation and the
booking click are required steps and raise on failure.
"""
import time

import content_checks
from locators import click_with_fallback, find_first_visible, resolve_fields
from medical_config import TestConfig, appointment_date


MAKE_APPOINTMENT = "#btn-make-appointment"
LOGIN_FIELDS = {
    "username": ["#txt-username", "input[type='text']", "input[placeholder*='name']"],
    "password": ["#txt-password", "input[type='password']"],
    "login": ["#btn-login", "button[type='submit']"],
}
LOGIN_FORM_INDICATORS = ["#txt-username", "input[type='text']", "input[placeholder*='name']", "input[placeholder*='user']"]
FACILITY_SELECTORS = ["#combo_facility", "select"]
READMISSION_SELECTORS = ["#chk_hospotal_readmission", "input[type='checkbox']"]
DATE_SELECTORS = ["#txt_visit_date", "input[type='date']"]
COMMENT_SELECTORS = ["#txt_comment", "textarea"]
PROGRAM_SELECTORS = {
    "Medicare": "#radio_program_medicare",
    "Medicaid": "#radio_program_medicaid",
    "None": "#radio_program_none",
}
BOOK_BUTTON = "#btn-book-appointment"
CONFIRMATION_FIELDS = {
    "facility": "#facility",
    "readmission": "#hospital_readmission",
    "program": "#program",
    "visit_date": "#visit_date",
    "comment": "#comment",
}
MENU_TOGGLE = "#menu-toggle"
LOGOUT_LINK = "a[href*='logout']"


async def _verify(reporter, page, name: str, passed: bool, details: str = "") -> None:
    if reporter:
        await reporter.log_verification(page, name, passed, details)


async def _step(reporter, page, name: str, description: str) -> None:
    if reporter:
        await reporter.log_step(page, name, description)


async def open_home(page, config: TestConfig) -> None:
    await page.goto(config.base_url, wait_until="networkidle", timeout=config.navigation_timeout)


async def open_login(page, config: TestConfig) -> None:
    await page.click(MAKE_APPOINTMENT, timeout=config.action_timeout)
    await page.wait_for_load_state("networkidle")


async def perform_flexible_login(page, credentials, reporter=None, verbose: bool = False) -> bool:
    """Fill and submit whichever login form is showing.

    Returns False, without raising, when no complete form is found; the caller
    may already be logged in.
    """
    await _step(reporter, page, "LOGIN", "Attempting user authentication")
    print("🔐 Attempting login...")
    fields = await resolve_fields(page, LOGIN_FIELDS, verbose=verbose)
    if all(fields.values()):
        await page.fill(fields["username"], credentials.username)
        await page.fill(fields["password"], credentials.password)
        await page.click(fields["login"])
        await page.wait_for_load_state("networkidle")
        await _verify(
            reporter, page, "Login Form Found", True,
            f"Fields: username={fields['username']}, password={fields['password']}, login={fields['login']}",
        )
        print("✅ Login performed successfully")
        return True
    message = "Login form not found, may already be logged in or on different page"
    await _verify(reporter, page, "Login Form Found", False, message)
    print(f"⚠️ {message}")
    return False


async def appointment_form_state(page) -> dict:
    return {
        "facility": bool(await find_first_visible(page, FACILITY_SELECTORS[:1])),
        "visit_date": bool(await find_first_visible(page, DATE_SELECTORS[:1])),
    }


async def is_on_appointment_page(page) -> bool:
    state = await appointment_form_state(page)
    return state["facility"] or state["visit_date"]


async def is_on_login_form(page) -> bool:
    if "login" in (page.url or ""):
        return True
    return bool(await find_first_visible(page, LOGIN_FORM_INDICATORS[:1]))


async def login_form_indicators(page) -> list[bool]:
    return [bool(await find_first_visible(page, [sel])) for sel in LOGIN_FORM_INDICATORS]


async def select_healthcare_program(page, program: str = "None", reporter=None, verbose: bool = False):
    """Select a program radio, preferring ``program`` and falling back to the others.

    Returns the ClickOutcome of the radio that was selected, or None.
    """
    await _step(reporter, page, "PROGRAM SELECTION", "Selecting healthcare program")
    print("🏥 Selecting healthcare program safely...")
    ordered = [PROGRAM_SELECTORS[program]] if program in PROGRAM_SELECTORS else []
    ordered += [sel for sel in PROGRAM_SELECTORS.values() if sel not in ordered]
    for selector in ordered:
        if not await find_first_visible(page, [selector]):
            continue
        outcome = await click_with_fallback(page, selector, verbose=verbose)
        if outcome.performed:
            await _verify(reporter, page, "Program Selected", True, f"Using {outcome.strategy} click: {selector}")
            print(f"✅ Selected program using {outcome.strategy} click: {selector}")
            return outcome
    await _verify(reporter, page, "Program Selected", False, "Could not select any healthcare program")
    print("⚠️ Could not select any healthcare program, but continuing...")
    return None


async def fill_appointment_form(
    page,
    patient,
    config: TestConfig,
    reporter=None,
    facility: str | None = None,
    program: str = "None",
    visit_date: str | None = None,
    comment: str | None = None,
    readmission: bool = False,
    verbose: bool = False,
) -> dict:
    """Fill each appointment field that can be found; returns what was filled."""
    await _step(reporter, page, "FORM FILLING", f"Completing appointment form for {patient.name}")
    print("📝 Filling appointment form safely...")
    facility = facility or config.facilities[0]
    visit_date = visit_date if visit_date is not None else appointment_date()
    comment = comment if comment is not None else patient.comment()
    filled = {}

    selector = await find_first_visible(page, FACILITY_SELECTORS, verbose=verbose)
    if selector:
        await page.select_option(selector, facility)
        filled["facility"] = facility
        await _verify(reporter, page, "Facility Selected", True, facility)
        print(f"✅ Selected facility: {facility}")

    if readmission:
        selector = await find_first_visible(page, READMISSION_SELECTORS, verbose=verbose)
        if selector:
            await page.check(selector)
            filled["readmission"] = True

    selector = await find_first_visible(page, DATE_SELECTORS, verbose=verbose)
    if selector:
        await page.fill(selector, "")
        await page.fill(selector, visit_date)
        # close the datepicker so it does not cover the comment box
        await page.keyboard.press("Escape")
        filled["visit_date"] = visit_date
        await _verify(reporter, page, "Date Selected", True, visit_date)
        print(f"✅ Set appointment date: {visit_date}")

    selector = await find_first_visible(page, COMMENT_SELECTORS, verbose=verbose)
    if selector:
        await page.fill(selector, comment)
        filled["comment"] = comment
        await _verify(
            reporter, page, "Medical Info Added", True,
            f"Patient: {patient.name}, Conditions: {len(patient.conditions)}",
        )
        print("✅ Added patient medical information")

    outcome = await select_healthcare_program(page, program, reporter=reporter, verbose=verbose)
    if outcome:
        filled["program"] = outcome.selector
    return filled


async def verify_form_completion(page) -> bool:
    for selector in ("#combo_facility", "#txt_visit_date", "#txt_comment"):
        if not await find_first_visible(page, [selector]):
            return False
    return True


async def book_appointment(page, config: TestConfig, reporter=None) -> int:
    """Submit the form and return the elapsed milliseconds."""
    started = time.monotonic()
    await page.click(BOOK_BUTTON, timeout=config.action_timeout)
    await page.wait_for_load_state("networkidle")
    elapsed = int((time.monotonic() - started) * 1000)
    if reporter:
        reporter.log_performance("Registration Submission Time", elapsed)
    return elapsed


async def validate_booking_outcome(page, config: TestConfig, reporter=None):
    await _step(reporter, page, "VALIDATION", "Verifying registration success")
    text = await content_checks.page_text(page)
    url = page.url
    indicators = content_checks.success_indicators(text, url)
    overall = content_checks.overall_success(indicators, config.policy)
    if reporter:
        for indicator in indicators:
            await reporter.log_check(page, indicator)
        await reporter.log_check(page, overall)
    if overall.passed:
        print(f"✅ Registration successful: {overall.details}")
    else:
        print("⚠️ Registration confirmation not clear")
        print(f"Page URL: {url}")
        print(f"Page content sample: {text[:200]}...")
    return overall


async def read_confirmation(page) -> dict:
    values = {}
    for key, selector in CONFIRMATION_FIELDS.items():
        try:
            values[key] = (await page.text_content(selector, timeout=2000) or "").strip()
        except Exception:
            values[key] = None
    return values


async def logout(page, config: TestConfig) -> bool:
    toggle = await click_with_fallback(page, MENU_TOGGLE, timeout=config.action_timeout)
    if not toggle.performed:
        return False
    link = await click_with_fallback(page, LOGOUT_LINK, timeout=config.action_timeout)
    if link.performed:
        await page.wait_for_load_state("networkidle")
    return link.performed


async def clear_session(page) -> None:
    await page.context.clear_cookies()
