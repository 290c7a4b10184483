from typing import List, Dict, Any

from semgrep_comment.report import get_severity


HEADER = "# Semgrep Scan Results"
NO_ISSUES = "✅ No issues found!"


def permalink(owner: str, repo: str, ref: str, path: str, line: Any) -> str:
    return f"https://github.com/{owner}/{repo}/blob/{ref}/{path}#L{line}"


def format_finding(finding: Dict[str, Any], owner: str, repo: str, ref: str) -> List[str]:
    # Message, path and snippet are interpolated unescaped
    extra = finding.get("extra") or {}
    start = finding.get("start") or {}
    path = finding.get("path", "")
    line = start.get("line")
    return [
        f"### {get_severity(finding).upper()}: {finding.get('check_id', '')}",
        f"[**File:** `{path}`]({permalink(owner, repo, ref, path, line)})",
        f"**Location:** Line {line}, Column {start.get('col')}",
        "",
        f"{extra.get('message', '')}",
        "",
        "```",
        f"{extra.get('lines', '')}",
        "```",
        "",
    ]


def build_comment(findings: List[Dict[str, Any]], owner: str, repo: str, ref: str) -> str:
    """
    Render findings as the PR comment body.

    The renderer does no filtering of its own: the count line reflects
    whatever list it is handed, in the order given.
    """
    lines = [HEADER, ""]
    if not findings:
        lines.append(NO_ISSUES)
        return "\n".join(lines) + "\n"

    lines.append(f"Found {len(findings)} issue(s):")
    lines.append("")
    for finding in findings:
        lines.extend(format_finding(finding, owner, repo, ref))
    return "\n".join(lines) + "\n"
