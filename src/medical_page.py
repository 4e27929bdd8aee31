from medical_config import TestConfig


def by_testid(value: str) -> str:
    return f'[data-testid="{value}"]'


class MedicalAIPage:
    """Page object for the AI case-processing workflow.

    Each method runs a fixed UI sequence and then waits for its
    post-condition element. A wait that times out raises and fails the test.
    """

    def __init__(self, page, config: TestConfig | None = None):
        self.page = page
        self.config = config or TestConfig()

    async def login_as_medical_professional(self, username: str, password: str) -> None:
        await self.page.goto(self.config.url("/login"), timeout=self.config.navigation_timeout)
        await self.page.fill(by_testid("username"), username)
        await self.page.fill(by_testid("password"), password)
        await self.page.click(by_testid("login-btn"))
        await self.page.wait_for_selector(by_testid("dashboard"), state="visible", timeout=self.config.element_timeout)

    async def create_medical_case(self, patient_case: dict) -> None:
        await self.page.click(by_testid("new-case-btn"))
        await self.page.fill(by_testid("patient-id"), str(patient_case["id"]))
        await self.page.select_option(by_testid("department"), patient_case["department"])
        await self.page.click(by_testid("create-case"))

    async def trigger_ai_analysis(self) -> None:
        await self.page.click(by_testid("ai-analyze-btn"))
        await self.page.wait_for_selector(by_testid("ai-processing"), state="visible", timeout=self.config.ai_processing_timeout)

    async def switch_language(self, language: str) -> None:
        await self.page.click(by_testid("language-selector"))
        await self.page.click(by_testid(f"lang-{language}"))
        await self.page.wait_for_timeout(1000)
