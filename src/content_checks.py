"""Heuristic checks over page content.

Scoring is kept in plain functions over extracted data so it can be checked
without a browser; the coroutines at the bottom pull that data from a page.
"""
from dataclasses import dataclass, field

from medical_config import ValidationPolicy


DEFAULT_POLICY = ValidationPolicy()

LANG_PREFIXES = (("en", "english"), ("es", "spanish"), ("fr", "french"))
SPANISH_MARKERS = (" el ", " la ", " de ")
FRENCH_MARKERS = (" le ", " la ", " et ")

MEDICAL_COLORS = ("blue", "green", "white", "teal", "cyan", "gray")
TRANSPARENT_BACKGROUNDS = ("rgba(0, 0, 0, 0)", "transparent")
DEFAULT_TEXT_COLORS = ("rgb(0, 0, 0)", "rgba(0, 0, 0, 0)")

MEDICAL_ALT_KEYWORDS = ("medical", "health", "care", "doctor", "hospital")
POSITIVE_TERMS = ("professional", "quality", "care", "service", "health")
NEGATIVE_TERMS = ("inappropriate", "offensive", "rude")
CRITICAL_SECTIONS = ("Make Appointment", "Login", "Healthcare", "Service")


@dataclass(frozen=True)
class Verification:
    name: str
    passed: bool
    details: str = ""


@dataclass
class AccessibilityStats:
    total_inputs: int
    accessible_inputs: int
    details: list = field(default_factory=list)

    @property
    def score(self) -> float:
        if self.total_inputs <= 0:
            return 0.0
        return self.accessible_inputs / self.total_inputs * 100

    def as_dict(self) -> dict:
        return {
            "totalInputs": self.total_inputs,
            "accessibleInputs": self.accessible_inputs,
            "accessibilityScore": self.score,
            "details": self.details,
        }


@dataclass
class ColorStats:
    medical_color_count: int
    total_colored_elements: int

    @property
    def percentage(self) -> float:
        if self.total_colored_elements <= 0:
            return 0.0
        return self.medical_color_count / self.total_colored_elements * 100

    def as_dict(self) -> dict:
        return {
            "medicalColorCount": self.medical_color_count,
            "totalColoredElements": self.total_colored_elements,
            "medicalColorPercentage": self.percentage,
        }


def detect_language(html_lang: str | None, page_text: str, sample_chars: int = 1000) -> str:
    """Guess the page language; the html lang attribute wins over page text."""
    if html_lang:
        for prefix, language in LANG_PREFIXES:
            if html_lang.startswith(prefix):
                return language
    sample = (page_text or "").lower()[:sample_chars]
    if any(marker in sample for marker in SPANISH_MARKERS):
        return "spanish"
    if any(marker in sample for marker in FRENCH_MARKERS):
        return "french"
    return "english"


def find_terms(text: str, terms) -> list[str]:
    haystack = (text or "").lower()
    return [term for term in terms if term.lower() in haystack]


def _found_detail(found: list, expected) -> str:
    return f"Found: {', '.join(found)} ({len(found)}/{len(expected)})"


def terminology_verifications(text: str, term_set, policy: ValidationPolicy = DEFAULT_POLICY) -> tuple[list[Verification], dict]:
    common = find_terms(text, term_set.common)
    clinical = find_terms(text, term_set.clinical)
    forms = find_terms(text, term_set.forms)
    checks = [
        Verification("Common Medical Terms", len(common) >= policy.min_terms_found, _found_detail(common, term_set.common)),
        Verification(
            "Clinical Terms",
            len(clinical) >= policy.min_terms_found,
            _found_detail(clinical, term_set.clinical) if clinical else "No clinical terms found on page",
        ),
        Verification("Form Terminology", len(forms) >= policy.min_terms_found, _found_detail(forms, term_set.forms)),
    ]
    summary = {
        "commonTerms": {"expected": len(term_set.common), "found": len(common), "terms": common},
        "clinicalTerms": {"expected": len(term_set.clinical), "found": len(clinical), "terms": clinical},
        "formTerms": {"expected": len(term_set.forms), "found": len(forms), "terms": forms},
    }
    return checks, summary


def accessibility_verification(stats: AccessibilityStats, policy: ValidationPolicy = DEFAULT_POLICY) -> Verification:
    score = stats.score
    return Verification(
        "Form Accessibility",
        score > policy.min_accessibility_score,
        f"{stats.accessible_inputs}/{stats.total_inputs} inputs accessible ({score:.1f}%)",
    )


def color_analysis(styles) -> ColorStats:
    """Count medical colour hits over (background, text colour) pairs."""
    count = 0
    total = 0
    for style in styles:
        bg = style.get("backgroundColor", "")
        color = style.get("color", "")
        if bg not in TRANSPARENT_BACKGROUNDS:
            total += 1
            count += sum(1 for c in MEDICAL_COLORS if c in bg)
        if color not in DEFAULT_TEXT_COLORS:
            total += 1
            count += sum(1 for c in MEDICAL_COLORS if c in color)
    return ColorStats(medical_color_count=count, total_colored_elements=total)


def color_verification(stats: ColorStats, policy: ValidationPolicy = DEFAULT_POLICY) -> Verification:
    return Verification(
        "Medical-Appropriate Colors",
        stats.percentage > policy.min_medical_color_pct,
        f"{stats.medical_color_count} medical colors out of {stats.total_colored_elements} elements ({stats.percentage:.1f}%)",
    )


def success_indicators(page_text: str, url: str) -> list[Verification]:
    text = page_text or ""
    url = url or ""
    return [
        Verification("Appointment Confirmation Text", "Appointment Confirmation" in text),
        Verification("Facility Mentioned", "Facility" in text),
        Verification("Program Mentioned", "Program" in text),
        Verification("Visit Date Mentioned", "Visit Date" in text),
        Verification("Confirmation URL", "confirmation" in url),
        Verification("Appointment Booked", "appointment" in text and "booked" in text),
        Verification("Success Text", "success" in text),
        Verification("Completed Text", "completed" in text),
    ]


def overall_success(indicators: list[Verification], policy: ValidationPolicy = DEFAULT_POLICY) -> Verification:
    hits = sum(1 for i in indicators if i.passed)
    return Verification(
        "Overall Registration Success",
        hits >= policy.min_success_indicators,
        f"{hits}/{len(indicators)} success indicators found",
    )


def cultural_verifications(text: str) -> tuple[list[Verification], dict]:
    positive = find_terms(text, POSITIVE_TERMS)
    negative = find_terms(text, NEGATIVE_TERMS)
    checks = [
        Verification(
            "Positive Cultural Content",
            bool(positive),
            f"Found positive terms: {', '.join(positive)} ({len(positive)}/{len(POSITIVE_TERMS)})",
        ),
        Verification(
            "No Negative Cultural Content",
            not negative,
            f"Negative terms found: {', '.join(negative) if negative else 'None'}",
        ),
    ]
    summary = {
        "positiveTerms": {"expected": len(POSITIVE_TERMS), "found": len(positive), "terms": positive},
        "negativeTerms": {"expected": len(NEGATIVE_TERMS), "found": len(negative), "terms": negative},
        "overallAppropriate": bool(positive) and not negative,
    }
    return checks, summary


def is_medical_image(alt: str | None) -> bool:
    if not alt:
        return False
    alt = alt.lower()
    return any(k in alt for k in MEDICAL_ALT_KEYWORDS)


def imagery_verifications(images: list[dict]) -> tuple[list[Verification], dict]:
    medical = [img for img in images if is_medical_image(img.get("alt"))]
    with_alt = [img for img in images if img.get("alt")]
    checks = [
        Verification(
            "Medical Images Present",
            bool(medical),
            f"Found {len(medical)} medical-related images out of {len(images)} total",
        ),
        Verification("Images Have Alt Text", bool(with_alt), f"{len(with_alt)}/{len(images)} images have alt text"),
    ]
    summary = {
        "totalImages": len(images),
        "medicalImages": len(medical),
        "imagesWithAlt": len(with_alt),
        "altTextCoverage": (len(with_alt) / len(images) * 100) if images else 0,
        "imageDetails": images,
    }
    return checks, summary


def heading_verification(headings: list[dict]) -> Verification:
    levels = sorted({h.get("level") for h in headings})
    has_h1 = any(h.get("tag") == "H1" for h in headings)
    return Verification(
        "Heading Hierarchy - H1 Present",
        has_h1,
        f"Found {len(headings)} headings across {len(levels)} levels",
    )


def critical_sections_verification(text: str, sections=CRITICAL_SECTIONS) -> tuple[Verification, list[str]]:
    # case-sensitive on purpose, these are visible labels
    found = [s for s in sections if s in (text or "")]
    return Verification("Critical Sections", bool(found), _found_detail(found, sections)), found


def content_organization_score(groups: int, nav_elements: int, policy: ValidationPolicy = DEFAULT_POLICY) -> int:
    return min(policy.max_content_score, (groups + nav_elements) * policy.content_score_per_element)


ACCESSIBILITY_JS = """
() => {
    const inputs = document.querySelectorAll('input, textarea, select');
    const details = [];
    inputs.forEach(input => {
        const hasAriaLabel = !!input.getAttribute('aria-label');
        const hasPlaceholder = !!input.getAttribute('placeholder');
        const hasLabel = !!(input.id && document.querySelector(`label[for="${input.id}"]`));
        if (hasAriaLabel || hasPlaceholder || hasLabel) {
            details.push({type: input.tagName, id: input.id, hasAriaLabel, hasPlaceholder, hasLabel});
        }
    });
    return {totalInputs: inputs.length, accessibleInputs: details.length, details};
}
"""

COLOR_STYLES_JS = """
() => Array.from(document.querySelectorAll('*')).map(el => {
    const style = getComputedStyle(el);
    return {backgroundColor: style.backgroundColor, color: style.color};
})
"""

IMAGES_JS = "els => els.map(img => ({src: img.src || '', alt: img.alt || ''}))"

HEADINGS_JS = """
els => els.map(el => ({
    tag: el.tagName,
    text: (el.textContent || '').trim().slice(0, 50),
    level: parseInt(el.tagName.charAt(1))
}))
"""


async def page_text(page) -> str:
    return await page.text_content("body") or ""


async def detect_page_language(page, sample_chars: int = 1000) -> str:
    html_lang = await page.get_attribute("html", "lang")
    return detect_language(html_lang, await page_text(page), sample_chars=sample_chars)


async def collect_accessibility_stats(page) -> AccessibilityStats:
    raw = await page.evaluate(ACCESSIBILITY_JS)
    return AccessibilityStats(
        total_inputs=raw.get("totalInputs", 0),
        accessible_inputs=raw.get("accessibleInputs", 0),
        details=raw.get("details", []),
    )


async def collect_color_styles(page) -> list[dict]:
    return await page.evaluate(COLOR_STYLES_JS)


async def collect_images(page) -> list[dict]:
    return await page.eval_on_selector_all("img", IMAGES_JS)


async def collect_headings(page) -> list[dict]:
    return await page.eval_on_selector_all("h1, h2, h3, h4, h5, h6", HEADINGS_JS)


async def count_elements(page, selector: str) -> int:
    return await page.eval_on_selector_all(selector, "els => els.length")
