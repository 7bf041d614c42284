"""
Unit tests for the audit-history extractor.
"""

from datetime import date, datetime, timezone

import pytest

from stablecoin_risk.core.audit_history import (
    extract_audit_history,
    extract_issue_counts,
    extract_summary,
    infer_firm,
    is_audit_file,
    lookback_cutoff,
    split_sections,
)
from stablecoin_risk.core.models import RepoFile

REPO = "https://github.com/acme/usdx"

LONG_INTRO = "This repository contains the smart contracts for the USDX token and its minting module."
LONG_SUMMARY = "The review covered mint, burn and pause logic and found 2 critical, 3 high and 1 low severity issues."


def dated(path, day, content=None, url=None):
    return RepoFile(
        path=path,
        last_modified=datetime(day.year, day.month, day.day, tzinfo=timezone.utc),
        content=content,
        url=url,
    )


class TestIsAuditFile:

    @pytest.mark.unit
    @pytest.mark.parametrize("path,expected", [
        ("audits/Zellic-USDX-2024.md", True),
        ("docs/security-review/2023.pdf", True),
        ("Audit_Report_Final.PDF", True),
        ("contracts/Token.sol", False),
        ("audits/README", True),
        ("security/audit/2024/HALBORN_REPORT", True),
        ("docs/README", False),
        ("audit/AuditHelper.sol", False),
        ("docs/whitepaper.pdf", False),
    ])
    def test_detection(self, path, expected):
        assert is_audit_file(path) is expected


class TestInferFirm:
    """Firm name rules run in order: known list, parent segment, filename tokens."""

    @pytest.mark.unit
    def test_known_firm_matched_ignoring_punctuation(self):
        assert infer_firm("audits/trail-of-bits-2023.pdf") == "Trail of Bits"
        assert infer_firm("audits/2024/OpenZeppelin_USDX.pdf") == "OpenZeppelin"

    @pytest.mark.unit
    def test_parent_segment_before_audit_folder(self):
        assert infer_firm("security/acme-labs/audits/2024.pdf") == "Acme Labs"

    @pytest.mark.unit
    def test_filename_tokens_when_audit_folder_is_root(self):
        assert infer_firm("audits/BlueWave_Report.pdf") == "BlueWave"
        assert infer_firm("audits/nova-audit.md") == "Nova"

    @pytest.mark.unit
    def test_fallback_firm(self):
        assert infer_firm("audits/2024-final.pdf") == "Independent Auditor"


class TestSummaryExtraction:

    @pytest.mark.unit
    def test_split_sections_atx_and_setext(self):
        text = "preamble line\n\n# Title\n\nfirst\nsecond\n\nOverview\n========\n\nbody"
        sections = split_sections(text)
        assert sections == [
            (None, ["preamble line"]),
            ("Title", ["first second"]),
            ("Overview", ["body"]),
        ]

    @pytest.mark.unit
    def test_summary_section_preferred_over_intro(self):
        content = f"# USDX Audit\n\n{LONG_INTRO}\n\n## Executive Summary\n\nShort.\n\n{LONG_SUMMARY}\n"
        file = dated("audits/report.md", date(2024, 1, 1), content=content)
        assert extract_summary(file) == LONG_SUMMARY

    @pytest.mark.unit
    def test_setext_overview_heading(self):
        content = f"Overview\n--------\n\n{LONG_SUMMARY}\n"
        file = dated("audits/report.txt", date(2024, 1, 1), content=content)
        assert extract_summary(file) == LONG_SUMMARY

    @pytest.mark.unit
    def test_first_long_paragraph_without_summary_heading(self):
        content = f"# Findings\n\nNone.\n\n{LONG_INTRO}\n"
        file = dated("audits/report.md", date(2024, 1, 1), content=content)
        assert extract_summary(file) == LONG_INTRO

    @pytest.mark.unit
    def test_html_summary_section(self):
        content = (
            f"<html><body><h1>Report</h1><p>{LONG_INTRO}</p>"
            f"<h2>Summary</h2><p>{LONG_SUMMARY}</p><h2>Details</h2><p>Other</p></body></html>"
        )
        file = dated("audits/report.html", date(2024, 1, 1), content=content)
        assert extract_summary(file) == LONG_SUMMARY

    @pytest.mark.unit
    def test_binary_report_falls_back_to_filename(self):
        file = dated("audits/Zellic-USDX.pdf", date(2024, 1, 1))
        assert extract_summary(file) == "Security audit report: Zellic-USDX.pdf"


class TestIssueCounts:

    @pytest.mark.unit
    def test_counts_from_summary(self):
        counts = extract_issue_counts(LONG_SUMMARY)
        assert counts.to_dict() == {"critical": 2, "high": 3, "medium": 0, "low": 1}

    @pytest.mark.unit
    def test_first_mention_wins(self):
        counts = extract_issue_counts("Found 1 HIGH issue. After remediation 0 high remain.")
        assert counts.high == 1

    @pytest.mark.unit
    def test_no_mentions(self):
        assert extract_issue_counts("Security audit report: x.pdf").total == 0


class TestExtractAuditHistory:

    @pytest.mark.unit
    def test_lookback_cutoff_is_calendar_months(self, fixed_now):
        assert lookback_cutoff(fixed_now, 8) == date(2023, 10, 15)

    @pytest.mark.unit
    @pytest.mark.smoke
    def test_recent_reports_newest_first(self, fixed_now):
        files = [
            dated("audits/Zellic-2024.pdf", date(2024, 3, 1)),
            dated("audits/Cyfrin-2023.pdf", date(2023, 11, 20)),
            dated("audits/Hacken-2022.pdf", date(2022, 5, 1)),
            dated("contracts/Token.sol", date(2024, 5, 1)),
        ]
        records = extract_audit_history(REPO, files, now=fixed_now)
        assert [r.firm for r in records] == ["Zellic", "Cyfrin"]
        assert records[0].date == date(2024, 3, 1)

    @pytest.mark.unit
    def test_latest_report_kept_when_none_recent(self, fixed_now):
        files = [
            dated("audits/Hacken-2022.pdf", date(2022, 5, 1)),
            dated("audits/Certora-2023.pdf", date(2023, 2, 1)),
        ]
        records = extract_audit_history(REPO, files, now=fixed_now)
        assert len(records) == 1
        assert records[0].firm == "Certora"

    @pytest.mark.unit
    def test_no_audit_files(self, fixed_now):
        files = [dated("contracts/Token.sol", date(2024, 5, 1))]
        assert extract_audit_history(REPO, files, now=fixed_now) == []

    @pytest.mark.unit
    def test_undated_file_is_skipped(self, fixed_now):
        files = [
            RepoFile(path="audits/Undated.pdf"),
            dated("audits/Zellic-2024.pdf", date(2024, 3, 1)),
        ]
        records = extract_audit_history(REPO, files, now=fixed_now)
        assert [r.firm for r in records] == ["Zellic"]

    @pytest.mark.unit
    def test_links(self, fixed_now):
        files = [
            dated("audits/Zellic-2024.pdf", date(2024, 3, 1), url="https://example.org/zellic.pdf"),
            dated("audits/Cyfrin-2024.pdf", date(2024, 2, 1)),
        ]
        records = extract_audit_history(REPO, files, now=fixed_now)
        assert records[0].link == "https://example.org/zellic.pdf"
        assert records[1].link == f"{REPO}/blob/HEAD/audits/Cyfrin-2024.pdf"

    @pytest.mark.unit
    def test_issue_counts_come_from_content(self, repo_files, fixed_now):
        records = extract_audit_history(REPO, repo_files, now=fixed_now)
        assert len(records) == 1
        assert records[0].firm == "Zellic"
        assert records[0].issues.high == 1
