import json
import os
import sys
from dataclasses import dataclass
from typing import List, Dict, Any, Optional

import requests

from semgrep_comment.markdown import build_comment
from semgrep_comment.report import (
    ReportError,
    count_by_severity,
    filter_by_severity,
    get_severity,
    load_report,
    normalize,
    severity_rank,
)


DEFAULT_REF = "main"
DEFAULT_API_URL = "https://api.github.com"


class ConfigurationError(ValueError):
    """Raised when a required action input is missing."""


@dataclass
class RepositoryContext:
    owner: str
    repo: str
    ref: str = DEFAULT_REF
    pr_number: Optional[int] = None


def debug(msg: str):
    print(f"[SemgrepComment] {msg}")


def warning(msg: str):
    print(f"::warning::{msg}")


def set_failed(msg: str):
    print(f"::error::{msg}")


def get_env_bool(name: str, default: bool) -> bool:
    val = os.getenv(name)
    if val is None or val == "":
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "on"}


def get_input(name: str, required: bool = False) -> str:
    # Actions keeps hyphens in INPUT_ names; docker/local runs tend to use underscores
    key = "INPUT_" + name.replace(" ", "_").upper()
    val = os.getenv(key)
    if val is None:
        val = os.getenv(key.replace("-", "_"), "")
    val = val.strip()
    if required and not val:
        raise ConfigurationError(f"Missing required input: '{name}'")
    return val


def load_event(event_path: Optional[str]) -> Dict[str, Any]:
    if not event_path or not os.path.exists(event_path):
        return {}
    try:
        with open(event_path, "r", encoding="utf-8") as f:
            event = json.load(f)
    except (OSError, ValueError) as e:
        debug(f"Failed to read event payload {event_path}: {e}")
        return {}
    return event if isinstance(event, dict) else {}


def context_from_env(environ=None) -> RepositoryContext:
    """Build the repository context from the runner environment once, at startup."""
    env = os.environ if environ is None else environ
    event = load_event(env.get("GITHUB_EVENT_PATH"))

    full_name = env.get("GITHUB_REPOSITORY", "")
    if not full_name:
        full_name = (event.get("repository") or {}).get("full_name", "")
    owner, _, repo = full_name.partition("/")

    pr = event.get("pull_request") or {}
    ref = (pr.get("head") or {}).get("ref") or DEFAULT_REF
    return RepositoryContext(owner=owner, repo=repo, ref=ref, pr_number=pr.get("number"))


def annotation_level(severity: str) -> str:
    rank = severity_rank(severity)
    if rank >= 4:
        return "error"
    if rank >= 2:
        return "warning"
    return "notice"


def escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def escape_property(value: str) -> str:
    return escape_data(value).replace(":", "%3A").replace(",", "%2C")


def print_annotation(level: str, file: str, message: str, line: int = 1, col: int = 1):
    # Clamp to minimum of 1 to avoid invalid annotations
    line = int(line) if isinstance(line, int) and line > 0 else 1
    col = int(col) if isinstance(col, int) and col > 0 else 1
    print(f"::{level} file={escape_property(file)},line={line},col={col}::{escape_data(message)}")


def annotate_findings(findings: List[Dict[str, Any]]):
    for f in findings:
        start = f.get("start") or {}
        extra = f.get("extra") or {}
        message = f"{f.get('check_id', '')}: {extra.get('message', '')}"
        print_annotation(
            annotation_level(get_severity(f)),
            f.get("path", ""),
            message,
            start.get("line", 1),
            start.get("col", 1),
        )


def post_pr_comment(ctx: RepositoryContext, token: str, body: str, api_url: str = DEFAULT_API_URL):
    url = f"{api_url.rstrip('/')}/repos/{ctx.owner}/{ctx.repo}/issues/{ctx.pr_number}/comments"
    headers = {
        "Accept": "application/vnd.github.v3+json",
        "Authorization": f"token {token}",
        "User-Agent": "semgrep-pr-comment"
    }
    resp = requests.post(url, headers=headers, json={"body": body})
    resp.raise_for_status()
    debug(f"Posted PR comment to #{ctx.pr_number}")


def write_summary(path: str, summary: Dict[str, Any]):
    try:
        with open(path, "w", encoding="utf-8") as jf:
            json.dump(summary, jf, indent=2, sort_keys=True)
        debug(f"Wrote JSON summary to {path}")
    except OSError as e:
        debug(f"Failed to write JSON summary: {e}")


def run(ctx: RepositoryContext, api_url: str = DEFAULT_API_URL) -> int:
    report_path = get_input("report-path", required=True)
    github_token = get_input("github-token", required=True)
    severity_threshold = get_input("severity-threshold") or "INFO"
    annotations = get_env_bool("INPUT_ANNOTATIONS", True)
    json_output_path = get_input("json-output")

    findings = normalize(load_report(report_path))
    filtered = filter_by_severity(findings, severity_threshold)
    debug(f"{len(filtered)} of {len(findings)} finding(s) at or above {severity_threshold}")

    markdown = build_comment(filtered, ctx.owner, ctx.repo, ctx.ref)

    if annotations:
        annotate_findings(filtered)

    posted = False
    if ctx.pr_number is not None:
        post_pr_comment(ctx, github_token, markdown, api_url)
        posted = True
    else:
        warning("No pull request context - this action only comments if triggered on a PR.")

    if json_output_path:
        write_summary(json_output_path, {
            "threshold": severity_threshold,
            "total_count": len(findings),
            "filtered_count": len(filtered),
            "by_severity": count_by_severity(filtered),
            "comment_posted": posted,
        })

    if filtered:
        set_failed(f"Found {len(filtered)} {severity_threshold}+ severity issue(s).")
        return 1
    return 0


def main() -> int:
    try:
        ctx = context_from_env()
        return run(ctx, os.getenv("GITHUB_API_URL") or DEFAULT_API_URL)
    except (ConfigurationError, ReportError) as e:
        set_failed(str(e))
        return 1
    except Exception as e:
        set_failed(str(e) or "An unknown error occurred.")
        return 1


if __name__ == "__main__":
    sys.exit(main())
