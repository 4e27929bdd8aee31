import json
import re
import time
import traceback
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

from content_checks import Verification


class CaptureStatus(Enum):
    REPORTED = "reported"
    CAPTURE_FAILED = "capture-failed"


def sanitize_for_filename(text: str) -> str:
    text = re.sub(r"[^\w\s-]", "", text)
    text = re.sub(r"[-\s]+", "_", text)
    return text.strip("_").lower()[:100]


def format_elapsed(milliseconds: int) -> str:
    seconds = milliseconds // 1000
    minutes = seconds // 60
    if minutes > 0:
        return f"{minutes}m {seconds % 60}s"
    return f"{seconds}.{milliseconds % 1000}s"


class StepReporter:
    """Console + attachment reporting for one test.

    Attachments are written under ``output_dir`` and recorded in ``sink`` as
    ``("attachment", {...})`` pairs; pass the pytest item's
    ``user_properties`` so they reach the results file even from xdist
    workers. Nothing here raises into the test: a failed capture is printed
    and returned as ``CaptureStatus.CAPTURE_FAILED``.

    ``attempt`` is the run number of the test (2 and up for reruns); rerun
    attachments get their own file names so earlier attempts are kept.
    """

    def __init__(self, sink: list, output_dir, test_name: str = "test", clock=time.monotonic, attempt: int = 1):
        self.sink = sink
        self.output_dir = Path(output_dir)
        self.test_name = test_name
        self.attempt = attempt
        self.clock = clock
        self.start_time = clock()
        self.verifications: list[Verification] = []
        self._seq = 0

    def elapsed_ms(self) -> int:
        return int((self.clock() - self.start_time) * 1000)

    @property
    def soft_failures(self) -> list[Verification]:
        return [v for v in self.verifications if not v.passed]

    def next_path(self, label: str, extension: str = "png") -> Path:
        self._seq += 1
        prefix = sanitize_for_filename(self.test_name)
        if self.attempt > 1:
            prefix = f"{prefix}_retry{self.attempt - 1}"
        name = f"{prefix}_{self._seq:03d}_{sanitize_for_filename(label) or 'attachment'}.{extension}"
        return self.output_dir / name

    def _record(self, label: str, content_type: str, path: Path) -> None:
        self.sink.append(("attachment", {"name": label, "content_type": content_type, "path": str(path)}))

    async def attach_screenshot(self, page, label: str, full_page: bool = False) -> CaptureStatus:
        try:
            shot = await page.screenshot(full_page=full_page)
            path = self.next_path(label)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(shot)
        except Exception as e:
            print(f"⚠️ Could not capture screenshot: {label} ({e})")
            return CaptureStatus.CAPTURE_FAILED
        self._record(label, "image/png", path)
        return CaptureStatus.REPORTED

    def attach_file(self, label: str, path, content_type: str) -> CaptureStatus:
        """Record a file something else already wrote, e.g. a Playwright trace."""
        path = Path(path)
        if not path.exists():
            print(f"⚠️ Could not attach {label}: {path} was not written")
            return CaptureStatus.CAPTURE_FAILED
        self._record(label, content_type, path)
        print(f"📎 Attached {label}: {path}")
        return CaptureStatus.REPORTED

    async def attach_video(self, video, label: str = "VIDEO") -> CaptureStatus:
        # save_as waits for the page to close and the recording to finish
        try:
            path = self.next_path(label, extension="webm")
            path.parent.mkdir(parents=True, exist_ok=True)
            await video.save_as(str(path))
            await video.delete()
        except Exception as e:
            print(f"⚠️ Could not save video: {label} ({e})")
            return CaptureStatus.CAPTURE_FAILED
        self._record(label, "video/webm", path)
        return CaptureStatus.REPORTED

    def _attach_json(self, label: str, data) -> CaptureStatus:
        try:
            body = json.dumps(data, indent=2, default=str, ensure_ascii=False)
            path = self.next_path(label, extension="json")
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(body, encoding="utf-8")
        except Exception as e:
            print(f"⚠️ Could not write attachment: {label} ({e})")
            return CaptureStatus.CAPTURE_FAILED
        self._record(label, "application/json", path)
        return CaptureStatus.REPORTED

    async def log_step(self, page, step_name: str, description: str = "") -> CaptureStatus:
        print(f"⏰ [{format_elapsed(self.elapsed_ms())}] 📋 {step_name}: {description}")
        status = await self.attach_screenshot(page, f"{step_name} - {description}")
        if description:
            print(f"   📝 {description}")
        return status

    async def log_verification(self, page, name: str, passed: bool, details: str = "") -> CaptureStatus:
        passed = bool(passed)
        self.verifications.append(Verification(name, passed, details))
        status = "✅ PASS" if passed else "❌ FAIL"
        print(f"{'✅' if passed else '❌'} {name}: {status}")
        if details:
            print(f"   📊 {details}")
        return await self.attach_screenshot(page, f"VERIFICATION - {name} - {status}")

    async def log_check(self, page, verification: Verification) -> CaptureStatus:
        return await self.log_verification(page, verification.name, verification.passed, verification.details)

    async def log_error(self, page, error_name: str, error: BaseException) -> CaptureStatus:
        print(f"🚨 {error_name}: {error}")
        stack = "".join(traceback.format_exception(type(error), error, error.__traceback__))
        print(f"   Stack: {stack}")
        self._attach_json(f"ERROR DETAILS - {error_name}", {"error": str(error), "type": type(error).__name__, "stack": stack})
        viewport = await self.attach_screenshot(page, f"ERROR - {error_name}")
        full = await self.attach_screenshot(page, f"FULL PAGE - {error_name}", full_page=True)
        if CaptureStatus.CAPTURE_FAILED in (viewport, full):
            print(f"⚠️ Could not capture error screenshots: {error_name}")
            return CaptureStatus.CAPTURE_FAILED
        return CaptureStatus.REPORTED

    def log_performance(self, metric_name: str, value: float, unit: str = "ms") -> CaptureStatus:
        print(f"⏱️  {metric_name}: {value}{unit}")
        return self._attach_json(f"PERFORMANCE - {metric_name}", {
            "metric": metric_name,
            "value": value,
            "unit": unit,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })

    def log_test_data(self, data_name: str, data) -> CaptureStatus:
        print(f"📊 {data_name}: {json.dumps(data, indent=2, default=str, ensure_ascii=False)}")
        return self._attach_json(f"TEST DATA - {data_name}", data)

    def log_test_completion(self, test_name: str, success: bool) -> CaptureStatus:
        total = self.elapsed_ms()
        print(f"\n{'✅ COMPLETED SUCCESSFULLY' if success else '❌ COMPLETED WITH FAILURES'}")
        print(f"🏁 Test: {test_name}")
        print(f"⏱️  Total Duration: {total}ms")
        print("=" * 60)
        return self._attach_json(f"COMPLETION - {test_name}", {
            "test": test_name,
            "success": success,
            "durationMs": total,
            "verifications": len(self.verifications),
            "softFailures": [v.name for v in self.soft_failures],
        })
