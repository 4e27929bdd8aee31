import csv
import json
import os
import zipfile
from html import escape
from pathlib import Path


def summarize(results_json: dict) -> dict:
    tests = results_json.get("tests", [])
    return {
        "total": len(tests),
        "passed": sum(1 for r in tests if r.get("status") == "passed"),
        "failed": sum(1 for r in tests if r.get("status") == "failed"),
        "skipped": sum(1 for r in tests if r.get("status") == "skipped"),
        "flaky": sum(1 for r in tests if r.get("status") == "passed" and r.get("retries")),
    }


def write_results_json(results_json: dict, json_path: Path) -> None:
    json_path.parent.mkdir(parents=True, exist_ok=True)
    with open(json_path, "w", encoding="utf-8") as f:
        json.dump({**results_json, "summary": summarize(results_json)}, f, indent=2, ensure_ascii=False)


def write_html_report(results_json: dict, html_path: Path) -> None:
    counts = summarize(results_json)
    html_path.parent.mkdir(parents=True, exist_ok=True)
    html = f"""
<html><head><meta charset="utf-8" /><title>Medical E2E Test Report</title>
<style>
body {{ font-family: Arial, sans-serif; padding: 20px; }}
.summary {{ margin-bottom: 16px; }}
.pass {{ color: #0a7b44; }}
.fail {{ color: #b00020; }}
.skip {{ color: #8a6d00; }}
.tags {{ color: #555; font-size: 90%; }}
pre {{ background: #f6f8fa; padding: 12px; border-radius: 6px; overflow: auto; }}
</style>
</head><body>
  <h1>Medical E2E Test Report</h1>
  <div class="summary">
    <strong>Total:</strong> {counts['total']} &nbsp; <strong class="pass">Passed:</strong> {counts['passed']} &nbsp; <strong class="fail">Failed:</strong> {counts['failed']} &nbsp; <strong class="skip">Skipped:</strong> {counts['skipped']} &nbsp; <strong>Flaky:</strong> {counts['flaky']}
  </div>
  <hr />
  {''.join(render_test_result(tr, html_path.parent) for tr in results_json.get('tests', []))}
</body></html>
"""
    with open(html_path, "w", encoding="utf-8") as f:
        f.write(html)


def read_attachment_body(attachment: dict) -> str:
    if "body" in attachment:
        return attachment["body"]
    try:
        return Path(attachment["path"]).read_text(encoding="utf-8")
    except Exception:
        return f"(missing: {attachment.get('path')})"


def attachment_href(path: str, base_dir: Path) -> str:
    try:
        return os.path.relpath(path, base_dir)
    except ValueError:
        return path


def render_attachment(attachment: dict, base_dir: Path) -> str:
    name = escape(attachment.get("name", ""))
    content_type = attachment.get("content_type", "")
    path = attachment.get("path")
    if content_type == "image/png" and path:
        src = escape(attachment_href(path, base_dir))
        return f"<figure><figcaption>{name}</figcaption><img src=\"{src}\" style=\"max-width: 100%; border: 1px solid #ddd;\" /></figure>"
    if content_type.startswith("video/") and path:
        src = escape(attachment_href(path, base_dir))
        return f"<figure><figcaption>{name}</figcaption><video controls src=\"{src}\" style=\"max-width: 100%;\"></video></figure>"
    if content_type == "application/zip" and path:
        href = escape(attachment_href(path, base_dir))
        return f"<p><a href=\"{href}\">{name}</a> (open with <code>playwright show-trace</code>)</p>"
    return f"<details><summary>{name}</summary><pre>{escape(read_attachment_body(attachment))}</pre></details>"


def render_test_result(test_result: dict, base_dir: Path) -> str:
    status = test_result.get("status", "unknown")
    status_class = {"passed": "pass", "skipped": "skip"}.get(status, "fail")
    name = escape(test_result.get("name", "Unnamed Test"))
    error = test_result.get("error", "")
    tags = " ".join(
        f"{key}={escape(str(test_result[key]))}" for key in ("group", "category", "priority") if test_result.get(key)
    )
    retries = test_result.get("retries", 0)
    attachments = "".join(render_attachment(a, base_dir) for a in test_result.get("attachments", []))
    error_block = f"<pre>{escape(error)}</pre>" if error else ""
    return f"""
  <section>
    <h3 class="{status_class}">{name} — {status.upper()}</h3>
    <div class="tags">{tags} &nbsp; duration={test_result.get('duration', 0):.2f}s &nbsp; retries={retries}</div>
    <details>
      <summary>Attachments ({len(test_result.get('attachments', []))})</summary>
      {attachments}
    </details>
    {error_block}
  </section>
  <hr />
"""


def attachment_paths(results_json: dict) -> list[Path]:
    paths = []
    for test_result in results_json.get("tests", []):
        for attachment in test_result.get("attachments", []):
            path = attachment.get("path")
            if path and Path(path) not in paths:
                paths.append(Path(path))
    return paths


def archive_name(path: Path, root: Path | None) -> str:
    if root is not None:
        try:
            return path.resolve().relative_to(root.resolve()).as_posix()
        except ValueError:
            pass
    return path.name


def archive_files(zip_path: Path, files: list[Path], root: Path | None = None) -> None:
    """Zip the files that exist; under ``root`` they keep their relative paths."""
    written = set()
    with zipfile.ZipFile(zip_path, "w") as zf:
        for f in files:
            name = archive_name(f, root)
            if f.exists() and name not in written:
                zf.write(f, arcname=name)
                written.add(name)


def log_to_csv(log_path: Path, timestamp: str, artifacts: dict, counts: dict) -> None:
    csv_exists = log_path.exists()
    log_path.parent.mkdir(parents=True, exist_ok=True)
    with open(log_path, "a", newline="") as csvfile:
        writer = csv.writer(csvfile)
        if not csv_exists:
            writer.writerow(["Timestamp", "Total", "Passed", "Failed", "Results", "JUnit", "Report", "Archive"])
        writer.writerow([
            timestamp,
            counts.get("total", 0),
            counts.get("passed", 0),
            counts.get("failed", 0),
            str(artifacts.get("results")),
            str(artifacts.get("junit")),
            str(artifacts.get("report")),
            str(artifacts.get("archive")),
        ])
