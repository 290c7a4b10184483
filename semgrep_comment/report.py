import json
from pathlib import Path
from typing import List, Dict, Any


SEVERITY_RANKS = {
    "CRITICAL": 5,
    "HIGH": 4,
    "MEDIUM": 3,
    "LOW": 2,
    "INFO": 1,
}


class ReportError(Exception):
    """Raised when the Semgrep report cannot be read or parsed."""


def load_report(path: str) -> Any:
    p = Path(path)
    try:
        with p.open("r", encoding="utf-8") as f:
            content = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise ReportError(f"Failed to read report {path}: {e}") from e
    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        raise ReportError(f"Failed to parse report {path} as JSON: {e}") from e


def normalize(raw: Any) -> List[Dict[str, Any]]:
    """
    Pick the finding list out of a parsed Semgrep report.

    Semgrep writes either `results` or `errors`. A defined `results` wins even
    when empty; the two lists are never merged. A selected value that is not
    a list yields no findings.
    """
    if not isinstance(raw, dict):
        return []
    if raw.get("results") is not None:
        selected = raw["results"]
    elif raw.get("errors") is not None:
        selected = raw["errors"]
    else:
        return []
    return selected if isinstance(selected, list) else []


def get_severity(finding: Dict[str, Any]) -> str:
    extra = finding.get("extra") or {}
    return str(extra.get("severity") or "")


def severity_rank(severity: str) -> int:
    # Unknown labels rank with INFO
    return SEVERITY_RANKS.get((severity or "").upper(), 1)


def filter_by_severity(findings: List[Dict[str, Any]], threshold: str = "INFO") -> List[Dict[str, Any]]:
    minimum = severity_rank(threshold)
    return [f for f in findings if severity_rank(get_severity(f)) >= minimum]


def count_by_severity(findings: List[Dict[str, Any]]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for f in findings:
        sev = get_severity(f).upper() or "UNKNOWN"
        counts[sev] = counts.get(sev, 0) + 1
    return counts
