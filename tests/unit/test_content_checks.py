import pytest

import content_checks
from content_checks import (
    AccessibilityStats,
    ColorStats,
    accessibility_verification,
    color_analysis,
    color_verification,
    content_organization_score,
    critical_sections_verification,
    cultural_verifications,
    detect_language,
    heading_verification,
    imagery_verifications,
    overall_success,
    success_indicators,
    terminology_verifications,
)
from medical_config import ValidationPolicy
from medical_data import terms_for


CONFIRMATION_TEXT = """
Appointment Confirmation
Please be informed that your appointment has been booked as following:
Facility Hongkong CURA Healthcare Center
Apply for hospital readmission No
Healthcare Program None
Visit Date 01/11/2026
"""


@pytest.mark.parametrize("html_lang,text,expected", [
    ("es", "Welcome to the hospital and the clinic", "spanish"),
    ("es-MX", "", "spanish"),
    ("fr-CA", "", "french"),
    ("en", "Bienvenido a el hospital de la ciudad", "english"),
    (None, "Bienvenido a el hospital", "spanish"),
    (None, "Bienvenue et le docteur", "french"),
    (None, "Welcome to CURA Healthcare", "english"),
    ("de", "Willkommen", "english"),
])
def test_detect_language(html_lang, text, expected):
    assert detect_language(html_lang, text) == expected


def test_detect_language_reads_only_the_sample():
    text = "x" * 1000 + " el "
    assert detect_language(None, text) == "english"
    assert detect_language(None, text, sample_chars=2000) == "spanish"


def test_shared_marker_prefers_spanish():
    assert detect_language(None, "voir la page") == "spanish"


def test_accessibility_score_is_ratio_of_accessible_inputs():
    check = accessibility_verification(AccessibilityStats(total_inputs=4, accessible_inputs=3))

    assert check.passed
    assert check.details == "3/4 inputs accessible (75.0%)"


def test_accessibility_threshold_is_strict():
    assert not accessibility_verification(AccessibilityStats(total_inputs=2, accessible_inputs=1)).passed


def test_no_inputs_scores_zero():
    stats = AccessibilityStats(total_inputs=0, accessible_inputs=0)

    assert stats.score == 0.0
    assert not accessibility_verification(stats).passed
    assert stats.as_dict()["accessibilityScore"] == 0.0


def test_color_analysis_skips_transparent_and_default_colors():
    stats = color_analysis([
        {"backgroundColor": "rgba(0, 0, 0, 0)", "color": "rgb(0, 0, 0)"},
        {"backgroundColor": "white", "color": "teal"},
        {"backgroundColor": "red", "color": "rgb(0, 0, 0)"},
    ])

    assert stats.total_colored_elements == 3
    assert stats.medical_color_count == 2
    assert color_verification(stats).passed


def test_color_threshold_uses_policy():
    stats = ColorStats(medical_color_count=1, total_colored_elements=2)

    assert color_verification(stats).passed
    assert not color_verification(stats, ValidationPolicy(min_medical_color_pct=50.0)).passed


def test_confirmation_page_counts_as_success():
    indicators = success_indicators(CONFIRMATION_TEXT, "https://example.test/appointment.php#summary")
    overall = overall_success(indicators)

    assert len(indicators) == 8
    assert overall.passed
    assert overall.details == "5/8 success indicators found"


def test_blank_page_is_not_success():
    overall = overall_success(success_indicators("", ""))

    assert not overall.passed
    assert overall.details == "0/8 success indicators found"


def test_confirmation_url_alone_is_enough():
    assert overall_success(success_indicators("", "https://example.test/confirmation")).passed


def test_terminology_on_english_landing_page():
    text = "CURA Healthcare Service. We Care About Your Health. Make Appointment. Login. Username. Password."

    checks, summary = terminology_verifications(text, terms_for("english"))

    by_name = {c.name: c for c in checks}
    assert by_name["Common Medical Terms"].passed
    assert by_name["Form Terminology"].passed
    assert not by_name["Clinical Terms"].passed
    assert by_name["Clinical Terms"].details == "No clinical terms found on page"
    assert summary["commonTerms"]["terms"] == ["Appointment", "Health", "Care"]


def test_cultural_content_flags_negative_terms():
    checks, summary = cultural_verifications("Quality care from professional staff. Rude remarks.")

    assert checks[0].passed
    assert not checks[1].passed
    assert summary["negativeTerms"]["terms"] == ["rude"]
    assert summary["overallAppropriate"] is False


def test_imagery_recognises_medical_alt_text():
    checks, summary = imagery_verifications([
        {"src": "a.png", "alt": "Hospital lobby"},
        {"src": "b.png", "alt": ""},
    ])

    assert all(c.passed for c in checks)
    assert summary["medicalImages"] == 1
    assert summary["altTextCoverage"] == 50


def test_heading_needs_an_h1():
    assert heading_verification([{"tag": "H1", "level": 1}, {"tag": "H3", "level": 3}]).passed
    check = heading_verification([{"tag": "H2", "level": 2}])
    assert not check.passed
    assert check.details == "Found 1 headings across 1 levels"


def test_critical_sections_are_case_sensitive():
    check, found = critical_sections_verification("make appointment / Login")

    assert found == ["Login"]
    assert check.passed


def test_content_organization_score_is_capped():
    assert content_organization_score(3, 1) == 40
    assert content_organization_score(20, 5) == 100


async def test_collect_accessibility_stats_reads_page_counts(make_page):
    page = make_page(evaluate_result={"totalInputs": 5, "accessibleInputs": 4, "details": []})

    stats = await content_checks.collect_accessibility_stats(page)

    assert stats.score == 80.0


async def test_detect_page_language_uses_lang_attribute(make_page):
    page = make_page(html_lang="es", texts={"body": "Welcome"})

    assert await content_checks.detect_page_language(page) == "spanish"
