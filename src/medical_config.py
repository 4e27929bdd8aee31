import os
from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from types import MappingProxyType

from dotenv import load_dotenv


DEFAULT_BASE_URL = "https://katalon-demo-cura.herokuapp.com"
VISIT_DATE_FORMAT = "%d/%m/%Y"


@dataclass(frozen=True)
class Credentials:
    username: str
    password: str


@dataclass(frozen=True)
class ValidationPolicy:
    """Pass/fail thresholds for the heuristic page checks.

    These were tuned against the CURA demo site; other targets will need
    their own values.
    """
    min_accessibility_score: float = 50.0  # strictly greater than
    min_medical_color_pct: float = 30.0  # strictly greater than
    min_success_indicators: int = 1
    min_terms_found: int = 1
    min_form_elements: int = 1
    content_score_per_element: int = 10
    max_content_score: int = 100
    language_sample_chars: int = 1000


CREDENTIALS = MappingProxyType({
    "valid": Credentials("John Doe", "ThisIsNotAPassword"),
    "invalid": Credentials("invalid_user", "wrong_password"),
    "empty": Credentials("", ""),
})

FACILITIES = (
    "Hongkong CURA Healthcare Center",
    "Seoul CURA Healthcare Center",
    "Tokyo CURA Healthcare Center",
)

PROGRAMS = ("Medicare", "Medicaid", "None")

ENVIRONMENTS = MappingProxyType({
    "staging": DEFAULT_BASE_URL,
    "production": DEFAULT_BASE_URL,
})

SCREENSHOT_PATHS = MappingProxyType({
    "ai_workflow": "test-results/ai-workflows",
    "patient_registration": "test-results/patient-registration",
    "multilingual": "test-results/multilingual",
    "security": "test-results/security",
})

VIEWPORT = MappingProxyType({"width": 1366, "height": 768})


@dataclass(frozen=True)
class TestConfig:
    # not a test class, keep pytest from collecting it
    __test__ = False

    base_url: str = DEFAULT_BASE_URL
    timeout: int = 120000
    navigation_timeout: int = 30000
    element_timeout: int = 15000
    ai_processing_timeout: int = 60000
    action_timeout: int = 10000
    credentials: MappingProxyType = field(default_factory=lambda: CREDENTIALS)
    facilities: tuple = FACILITIES
    programs: tuple = PROGRAMS
    environments: MappingProxyType = field(default_factory=lambda: ENVIRONMENTS)
    screenshot_paths: MappingProxyType = field(default_factory=lambda: SCREENSHOT_PATHS)
    viewport: MappingProxyType = field(default_factory=lambda: VIEWPORT)
    ci: bool = False
    policy: ValidationPolicy = field(default_factory=ValidationPolicy)

    def url(self, path: str = "/") -> str:
        if path.startswith("http"):
            return path
        return self.base_url.rstrip("/") + "/" + path.lstrip("/")


def env_flag(value: str | None) -> bool:
    if value is None:
        return False
    return value.strip().lower() not in ("", "0", "false", "no", "off")


def load_config(env: dict | None = None, dotenv: bool = True) -> TestConfig:
    """Build the suite configuration, applying MEDICAL_APP_URL and CI overrides."""
    if env is None:
        if dotenv:
            load_dotenv()
        env = os.environ
    config = TestConfig()
    base_url = (env.get("MEDICAL_APP_URL") or "").strip()
    if base_url:
        config = replace(config, base_url=base_url)
    if env_flag(env.get("CI")):
        config = replace(config, ci=True)
    return config


def appointment_date(days_ahead: int = 14, today: date | None = None) -> str:
    visit = (today or date.today()) + timedelta(days=days_ahead)
    return visit.strftime(VISIT_DATE_FORMAT)
