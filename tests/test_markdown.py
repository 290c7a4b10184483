from semgrep_comment.markdown import build_comment


def make_finding(check_id="rule-1", severity="HIGH", path="a.py", line=10, col=2, message="bad", lines="x=1"):
    return {
        "check_id": check_id,
        "path": path,
        "start": {"line": line, "col": col},
        "end": {"line": line, "col": col + 3},
        "extra": {"message": message, "severity": severity, "lines": lines},
    }


def test_empty_findings_success_message():
    md = build_comment([], "o", "r", "ref")
    assert md == "# Semgrep Scan Results\n\n✅ No issues found!\n"
    assert "issue(s)" not in md


def test_single_finding_contents():
    md = build_comment([make_finding()], "o", "r", "main")
    assert "Found 1 issue(s):" in md
    assert "### HIGH: rule-1" in md
    assert "(https://github.com/o/r/blob/main/a.py#L10)" in md
    assert "[**File:** `a.py`]" in md
    assert "**Location:** Line 10, Column 2" in md
    assert "\nbad\n" in md
    assert "```\nx=1\n```" in md


def test_single_finding_exact_layout():
    md = build_comment([make_finding()], "o", "r", "main")
    assert md == (
        "# Semgrep Scan Results\n\n"
        "Found 1 issue(s):\n\n"
        "### HIGH: rule-1\n"
        "[**File:** `a.py`](https://github.com/o/r/blob/main/a.py#L10)\n"
        "**Location:** Line 10, Column 2\n\n"
        "bad\n\n"
        "```\n"
        "x=1\n"
        "```\n\n"
    )


def test_severity_is_uppercased_in_heading():
    md = build_comment([make_finding(severity="medium")], "o", "r", "main")
    assert "### MEDIUM: rule-1" in md


def test_findings_keep_input_order():
    findings = [
        make_finding(check_id="first", severity="LOW"),
        make_finding(check_id="second", severity="CRITICAL"),
        make_finding(check_id="third", severity="INFO"),
    ]
    md = build_comment(findings, "o", "r", "feature/x")
    assert "Found 3 issue(s):" in md
    assert md.index("LOW: first") < md.index("CRITICAL: second") < md.index("INFO: third")
    assert "https://github.com/o/r/blob/feature/x/a.py#L10" in md


def test_entries_are_separated_by_blank_line():
    md = build_comment([make_finding(check_id="a"), make_finding(check_id="b")], "o", "r", "main")
    assert "```\n\n### HIGH: b" in md


def test_message_and_snippet_are_not_escaped():
    md = build_comment([make_finding(message="use `eval` *here*", lines="a <b> ```")], "o", "r", "main")
    assert "use `eval` *here*" in md
    assert "a <b> ```" in md
