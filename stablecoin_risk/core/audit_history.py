"""
Audit-History Extractor.

Mines a repository file listing for audit reports and turns each into an
AuditRecord (firm, date, summary, link, issue counts).

Only reports modified within the lookback window (8 months by default) are
returned. When none qualify, the single most recent report is returned so
the caller always has a "latest known" reference whenever any audit
evidence exists. A file that fails to parse is logged and skipped.
"""

import re
from datetime import date, datetime
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

import pandas as pd
from bs4 import BeautifulSoup

from ..config.settings import AUDIT_LOOKBACK_MONTHS
from ..thresholds import (
    AUDIT_DIRECTORY_NAMES,
    AUDIT_DOCUMENT_EXTENSIONS,
    AUDIT_FALLBACK_FIRM,
    AUDIT_FIRMS,
    AUDIT_MIN_PARAGRAPH_CHARS,
    AUDIT_PATH_KEYWORDS,
    AUDIT_TEXT_EXTENSIONS,
    GENERIC_FILENAME_TOKENS,
)
from .logging_utils import get_logger
from .models import AuditRecord, IssueCounts, RepoFile

logger = get_logger(__name__)

SEVERITY_PATTERN = re.compile(r"(\d+)\s+(critical|high|medium|low)\b", re.IGNORECASE)
SUMMARY_HEADING_KEYWORDS = ("summary", "overview")
MARKDOWN_HEADING = re.compile(r"^\s{0,3}#{1,6}\s+(.*?)\s*#*\s*$")
SETEXT_UNDERLINE = re.compile(r"^\s{0,3}(=+|-+)\s*$")

FirmRule = Callable[[str, Sequence[str]], Optional[str]]


def _squash(text: str) -> str:
    return re.sub(r"[^a-z0-9]", "", text.lower())


def _extension(path: str) -> str:
    name = path.rsplit("/", 1)[-1].lower()
    return name[name.rfind("."):] if "." in name else ""


def is_audit_file(path: str) -> bool:
    """
    Audit-looking document: an audit keyword in the path and a document
    extension, or an extension-less file under an audit(s) directory.
    """
    lowered = path.lower()
    extension = _extension(lowered)
    if extension in AUDIT_DOCUMENT_EXTENSIONS:
        return any(keyword in lowered for keyword in AUDIT_PATH_KEYWORDS)
    directories = lowered.split("/")[:-1]
    return not extension and any(segment in AUDIT_DIRECTORY_NAMES for segment in directories)


# =============================================================================
# FIRM NAME INFERENCE
# =============================================================================

def firm_from_known_list(path: str, firms: Sequence[str]) -> Optional[str]:
    squashed = _squash(path)
    for firm in firms:
        if _squash(firm) in squashed:
            return firm
    return None


def firm_from_parent_segment(path: str, firms: Sequence[str]) -> Optional[str]:
    """Name taken from the segment just before the first 'audit' segment."""
    segments = [s for s in path.split("/") if s]
    for index, segment in enumerate(segments):
        if "audit" not in segment.lower():
            continue
        if index == 0:
            return None
        words = re.sub(r"[\d_\-\.\s]+", " ", segments[index - 1]).split()
        words = [w for w in words if w.lower() not in GENERIC_FILENAME_TOKENS]
        return " ".join(words).title() or None
    return None


def firm_from_filename_tokens(path: str, firms: Sequence[str]) -> Optional[str]:
    stem = path.rsplit("/", 1)[-1]
    if "." in stem:
        stem = stem[:stem.rfind(".")]
    tokens = [
        t for t in re.split(r"[^A-Za-z]+", stem)
        if len(t) > 1 and t.lower() not in GENERIC_FILENAME_TOKENS
    ]
    if not tokens:
        return None
    return " ".join(t.title() if t.islower() else t for t in tokens)


FIRM_RULES: Tuple[FirmRule, ...] = (
    firm_from_known_list,
    firm_from_parent_segment,
    firm_from_filename_tokens,
)


def infer_firm(path: str, firms: Sequence[str] = AUDIT_FIRMS, rules: Sequence[FirmRule] = FIRM_RULES) -> str:
    """Run the firm rules in order; never returns an empty name."""
    for rule in rules:
        firm = rule(path, firms)
        if firm:
            return firm
    return AUDIT_FALLBACK_FIRM


# =============================================================================
# SUMMARY EXTRACTION
# =============================================================================

def _normalize(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def _first_long(paragraphs: Iterable[str]) -> Optional[str]:
    for paragraph in paragraphs:
        paragraph = _normalize(paragraph)
        if len(paragraph) > AUDIT_MIN_PARAGRAPH_CHARS:
            return paragraph
    return None


def _is_summary_heading(title: str) -> bool:
    lowered = title.lower()
    return any(keyword in lowered for keyword in SUMMARY_HEADING_KEYWORDS)


def split_sections(text: str) -> List[Tuple[Optional[str], List[str]]]:
    """
    Split plain/markdown text into (heading, paragraphs) sections.

    Recognizes ATX ('# Title') and setext ('Title' over '====') headings.
    Text before the first heading belongs to a section with heading None.
    """
    lines = text.splitlines()
    sections: List[Tuple[Optional[str], List[str]]] = [(None, [])]
    buffer: List[str] = []

    def flush():
        if buffer:
            sections[-1][1].append(" ".join(buffer))
            buffer.clear()

    i = 0
    while i < len(lines):
        line = lines[i]
        atx = MARKDOWN_HEADING.match(line)
        setext = (
            line.strip()
            and i + 1 < len(lines)
            and SETEXT_UNDERLINE.match(lines[i + 1])
        )
        if atx:
            flush()
            sections.append((atx.group(1), []))
        elif setext:
            flush()
            sections.append((line.strip(), []))
            i += 1
        elif not line.strip():
            flush()
        else:
            buffer.append(line.strip())
        i += 1
    flush()
    return sections


def _summary_from_text(text: str) -> Optional[str]:
    sections = split_sections(text)
    for heading, paragraphs in sections:
        if heading and _is_summary_heading(heading):
            found = _first_long(paragraphs)
            if found:
                return found
    return _first_long(p for _, paragraphs in sections for p in paragraphs)


def _summary_from_html(html: str) -> Optional[str]:
    soup = BeautifulSoup(html, "html.parser")
    for heading in soup.find_all(re.compile(r"^h[1-6]$")):
        if not _is_summary_heading(heading.get_text()):
            continue
        paragraphs = []
        for sibling in heading.find_next_siblings():
            if re.match(r"^h[1-6]$", sibling.name or ""):
                break
            paragraphs.append(sibling.get_text(" "))
        found = _first_long(paragraphs)
        if found:
            return found
    return _first_long(p.get_text(" ") for p in soup.find_all("p"))


def extract_summary(file: RepoFile) -> str:
    """First long paragraph of a summary/overview section, else of the document."""
    summary = None
    if file.content and _extension(file.path) in AUDIT_TEXT_EXTENSIONS:
        if _extension(file.path) in (".html", ".htm"):
            summary = _summary_from_html(file.content)
        else:
            summary = _summary_from_text(file.content)
    return summary or f"Security audit report: {file.filename}"


def extract_issue_counts(summary: str) -> IssueCounts:
    """Read '<n> critical|high|medium|low' mentions; the first mention of each severity wins."""
    counts = {}
    for number, severity in SEVERITY_PATTERN.findall(summary):
        counts.setdefault(severity.lower(), int(number))
    return IssueCounts(**counts)


# =============================================================================
# EXTRACTION
# =============================================================================

def lookback_cutoff(now: datetime, months: int = AUDIT_LOOKBACK_MONTHS) -> date:
    """Calendar date `months` months before `now`."""
    return (pd.Timestamp(now) - pd.DateOffset(months=months)).date()


def build_audit_record(repo_url: str, file: RepoFile, firms: Sequence[str] = AUDIT_FIRMS) -> AuditRecord:
    if file.last_modified is None:
        raise ValueError(f"no modification date for {file.path}")
    summary = extract_summary(file)
    return AuditRecord(
        firm=infer_firm(file.path, firms),
        date=file.last_modified.date(),
        summary=summary,
        link=file.url or f"{repo_url.rstrip('/')}/blob/HEAD/{file.path}",
        issues=extract_issue_counts(summary),
    )


def extract_audit_history(
    repo_url: str,
    files: Iterable[RepoFile],
    now: Optional[datetime] = None,
    lookback_months: int = AUDIT_LOOKBACK_MONTHS,
    firms: Sequence[str] = AUDIT_FIRMS,
) -> List[AuditRecord]:
    """
    Build the audit history for a repository.

    Args:
        repo_url: Repository URL used to build report links
        files: Repository files (non-audit files are ignored)
        now: Reference time for the lookback window
        lookback_months: Rolling window in calendar months
        firms: Known audit firms, matched in order

    Returns:
        AuditRecords newest-first; the single latest record when none fall
        inside the window; empty when the repository has no audit files
    """
    now = now or datetime.now()
    records: List[AuditRecord] = []

    for file in files:
        if not is_audit_file(file.path):
            continue
        try:
            records.append(build_audit_record(repo_url, file, firms))
        except Exception as e:
            logger.warning("audit_file_skipped", repo=repo_url, path=file.path, error=str(e))

    if not records:
        return []

    records.sort(key=lambda r: (r.date, r.link or ""), reverse=True)
    cutoff = lookback_cutoff(now, lookback_months)
    recent = [r for r in records if r.date >= cutoff]

    logger.debug("audit_history_extracted", repo=repo_url, total=len(records), recent=len(recent))
    return recent if recent else records[:1]
