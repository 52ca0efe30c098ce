# apicase/reporter.py
"""
Run reports.

- console lines, one per test case (the ✅/❌ format)
- JSON, HTML and JUnit XML files, written atomically
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional
from xml.etree import ElementTree as ET

from jinja2 import BaseLoader, Environment, select_autoescape

from apicase.models import RunSummary, TestCaseResult

logger = logging.getLogger(__name__)

_HTML_TEMPLATE = """<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>apicase — {{ eid }}</title>
<style>
  body { font-family: system-ui, sans-serif; margin: 2rem; color: #111; }
  table { border-collapse: collapse; min-width: 40rem; }
  th, td { border: 1px solid #ddd; padding: .4rem .8rem; text-align: left; }
  .PASS { color: #0a7a2f; font-weight: 600; }
  .FAIL { color: #b00020; font-weight: 600; }
</style>
</head>
<body>
<h1>Run {{ eid }}</h1>
<p>{{ summary.started_at }} · {{ summary.duration_s }}s ·
   <span class="PASS">{{ summary.passed }} passed</span> ·
   <span class="FAIL">{{ summary.failed }} failed</span> of {{ summary.total }}</p>
<table>
  <thead><tr><th>#</th><th>Test</th><th>Status</th><th>Remarks</th></tr></thead>
  <tbody>
  {% for r in results %}
    <tr>
      <td>{{ loop.index }}</td>
      <td>{{ r.name }}</td>
      <td class="{{ r.status }}">{{ r.status }}</td>
      <td>{{ r.remarks or "" }}</td>
    </tr>
  {% endfor %}
  </tbody>
</table>
<p>Generated {{ now }}</p>
</body>
</html>
"""

_env = Environment(
    loader=BaseLoader(),
    autoescape=select_autoescape(enabled_extensions=("html", "xml"), default_for_string=True),
    enable_async=False,
)


def format_results(results: Iterable[TestCaseResult]) -> List[str]:
    return [str(r) for r in results]


def format_summary(summary: RunSummary) -> str:
    return (
        f"{summary.passed} passed, {summary.failed} failed, "
        f"{summary.total} total in {summary.duration_s}s"
    )


class Reporter:
    """Write run reports to `reports_dir`"""

    def __init__(self, reports_dir: str = "reports"):
        self.reports_dir = Path(reports_dir)
        self.reports_dir.mkdir(parents=True, exist_ok=True)

    def create_reports(self, summary: RunSummary, execution_id: Optional[str] = None) -> Dict[str, str]:
        """
        Returns:
            Dict with paths: {"json", "html", "junit"}
        """
        eid = execution_id or f"run_{datetime.now().strftime('%Y%m%d_%H%M%S')}_{uuid.uuid4().hex[:6]}"
        data = summary.to_dict()

        json_path = self.reports_dir / f"{eid}.json"
        html_path = self.reports_dir / f"{eid}.html"
        junit_path = self.reports_dir / f"{eid}.junit.xml"

        self._atomic_text_write(json_path, json.dumps(data, indent=2, ensure_ascii=False))
        logger.info(f"✅ JSON report → {json_path}")

        rows = [
            {
                "name": r.name,
                "status": "PASS" if r.passed else "FAIL",
                "remarks": None if r.passed else str(r.remarks),
            }
            for r in summary.results
        ]
        html = _env.from_string(_HTML_TEMPLATE).render(
            eid=eid,
            now=datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
            summary=summary,
            results=rows,
        )
        self._atomic_text_write(html_path, html)
        logger.info(f"✅ HTML report → {html_path}")

        self._atomic_text_write(junit_path, self._generate_junit_xml(summary, eid))
        logger.info(f"✅ JUnit XML → {junit_path}")

        return {"json": str(json_path), "html": str(html_path), "junit": str(junit_path)}

    @staticmethod
    def _generate_junit_xml(summary: RunSummary, execution_id: str) -> str:
        root = ET.Element("testsuites", name=execution_id)
        suite = ET.SubElement(
            root,
            "testsuite",
            name="apicase",
            tests=str(summary.total),
            failures=str(summary.failed),
            time=str(summary.duration_s),
        )
        for r in summary.results:
            case = ET.SubElement(suite, "testcase", name=r.name)
            if not r.passed:
                failure = ET.SubElement(case, "failure", message=str(r.remarks))
                failure.text = str(r)
        return ET.tostring(root, encoding="unicode", method="xml")

    @staticmethod
    def _atomic_text_write(path: Path, text: str) -> None:
        """Atomic file write"""
        tmp = path.with_suffix(path.suffix + ".tmp")
        tmp.write_text(text, encoding="utf-8")
        tmp.replace(path)
