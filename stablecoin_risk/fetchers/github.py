"""
GitHub Fetcher - code-hosting adapter.

Provides:
- parse_repo_url(url): (owner, repo) from a github.com URL
- find_github_url(website, coin_info): repository for a coin
- list_repo_files(repo_url): file listing with dates/content for audit candidates
- fetch_repo_activity(repo_url, files): commits, contributors, issues,
  security policy and the oracle signal
- detect_oracle_signal(paths): oracle heuristics from file paths
"""

import re
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

import requests
from bs4 import BeautifulSoup

from ..config.settings import (
    GITHUB_API_URL,
    GITHUB_RAW_URL,
    GITHUB_TOKEN,
    MAX_AUDIT_FILES,
    MAX_FETCH_WORKERS,
)
from ..core.audit_history import is_audit_file
from ..core.exceptions import ProviderError, StablecoinRiskError
from ..core.logging_utils import get_logger
from ..core.models import CoinInfo, OracleSignal, RepoActivity, RepoFile
from ..thresholds import (
    AUDIT_TEXT_EXTENSIONS,
    CENTRALIZED_PATH_KEYWORDS,
    ORACLE_PATH_KEYWORDS,
    PRICE_DEVIATION_PATH_KEYWORDS,
    RELIABLE_ORACLE_PROVIDERS,
    TIMELOCK_PATH_KEYWORDS,
)
from .http import get_json, get_response
from .website import fetch_page, normalize_url

logger = get_logger(__name__)

PROVIDER = "GitHub"

REPO_URL_PATTERN = re.compile(r"github\.com/([^/\s?#]+)/([^/\s?#]+)", re.IGNORECASE)
LAST_PAGE_PATTERN = re.compile(r'[?&]page=(\d+)[^>]*>;\s*rel="last"')
SECURITY_POLICY_PATHS = ("SECURITY.md", ".github/SECURITY.md", "docs/SECURITY.md")
RESERVED_OWNERS = ("orgs", "sponsors", "topics", "features", "about")


def _headers() -> Dict[str, str]:
    headers = {"Accept": "application/vnd.github.v3+json"}
    if GITHUB_TOKEN:
        headers["Authorization"] = f"token {GITHUB_TOKEN}"
    return headers


def _api(path: str, params: Dict = None):
    return get_response(f"{GITHUB_API_URL}{path}", PROVIDER, params=params, headers=_headers())


def parse_repo_url(url: str) -> Tuple[str, str]:
    """
    Split a repository URL into (owner, repo).

    Raises:
        ValueError: not a github.com/<owner>/<repo> URL
    """
    match = REPO_URL_PATTERN.search(url or "")
    if not match or match.group(1).lower() in RESERVED_OWNERS:
        raise ValueError(f"Invalid GitHub repository URL: {url!r}")
    owner, repo = match.group(1), match.group(2)
    if repo.endswith(".git"):
        repo = repo[:-4]
    return owner, repo


# =============================================================================
# REPOSITORY DISCOVERY
# =============================================================================

def github_links_from_html(html: str, base_url: str) -> List[str]:
    """Repository URLs linked from a page, in document order, deduplicated."""
    soup = BeautifulSoup(html, "html.parser")
    found = []
    for anchor in soup.find_all("a", href=True):
        href = anchor["href"]
        if "github.com" not in href.lower() or "github.io" in href.lower() or "/issues" in href:
            continue
        try:
            owner, repo = parse_repo_url(href)
        except ValueError:
            continue
        url = f"https://github.com/{owner}/{repo}"
        if url not in found:
            found.append(url)
    return found


def find_github_url(website: str, coin_info: Optional[CoinInfo] = None) -> str:
    """
    Repository URL for a coin: the provider's repo link first, then the
    first github.com/<owner>/<repo> anchor on the website. '' when none.
    """
    if coin_info is not None and coin_info.github:
        return coin_info.github.rstrip("/")
    if not website:
        return ""
    try:
        links = github_links_from_html(fetch_page(website), normalize_url(website))
    except Exception as e:
        logger.warning("github_discovery_failed", website=website, error=str(e))
        return ""
    return links[0] if links else ""


# =============================================================================
# FILE LISTING
# =============================================================================

def _parse_github_date(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _last_commit_date(owner: str, repo: str, path: str) -> Optional[datetime]:
    commits = _api(f"/repos/{owner}/{repo}/commits", {"path": path, "per_page": 1}).json()
    if not commits:
        return None
    commit = commits[0].get("commit") or {}
    return _parse_github_date((commit.get("committer") or commit.get("author") or {}).get("date"))


def _raw_content(owner: str, repo: str, branch: str, path: str) -> Optional[str]:
    lowered = path.lower()
    if not lowered.endswith(AUDIT_TEXT_EXTENSIONS):
        return None
    return get_response(f"{GITHUB_RAW_URL}/{owner}/{repo}/{branch}/{path}", PROVIDER, max_retries=0).text


def _describe_audit_file(owner: str, repo: str, branch: str, path: str) -> RepoFile:
    """Date, content and URL for one audit candidate; missing parts stay None."""
    url = f"https://github.com/{owner}/{repo}/blob/{branch}/{path}"
    try:
        last_modified = _last_commit_date(owner, repo, path)
        content = _raw_content(owner, repo, branch, path)
    except (StablecoinRiskError, ValueError) as e:
        logger.warning("audit_file_fetch_failed", repo=f"{owner}/{repo}", path=path, error=str(e))
        return RepoFile(path=path, url=url)
    return RepoFile(path=path, last_modified=last_modified, content=content, url=url)


def list_repo_files(repo_url: str, max_audit_files: int = MAX_AUDIT_FILES) -> List[RepoFile]:
    """
    List every blob in the repository's default branch.

    Audit-looking files (up to max_audit_files) carry their last commit
    date, a blob URL and, for text formats, their raw content; every other
    entry carries only its path.
    """
    owner, repo = parse_repo_url(repo_url)
    branch = _api(f"/repos/{owner}/{repo}").json().get("default_branch") or "main"
    tree = _api(f"/repos/{owner}/{repo}/git/trees/{branch}", {"recursive": "1"}).json()
    paths = [item["path"] for item in tree.get("tree") or [] if item.get("type") == "blob"]
    if tree.get("truncated"):
        logger.info("repo_tree_truncated", repo=f"{owner}/{repo}", paths=len(paths))

    audit_paths = [path for path in paths if is_audit_file(path)][:max_audit_files]
    with ThreadPoolExecutor(max_workers=MAX_FETCH_WORKERS) as executor:
        described = list(executor.map(lambda p: _describe_audit_file(owner, repo, branch, p), audit_paths))

    by_path = {f.path: f for f in described}
    files = [by_path.get(path) or RepoFile(path=path) for path in paths]
    logger.debug("repo_files_listed", repo=f"{owner}/{repo}", files=len(files), audit_candidates=len(described))
    return files


# =============================================================================
# ACTIVITY AND ORACLE SIGNAL
# =============================================================================

def count_from_link_header(response: requests.Response) -> int:
    """Total item count for a per_page=1 listing: the last page number, else the body length."""
    match = LAST_PAGE_PATTERN.search(response.headers.get("Link", ""))
    if match:
        return int(match.group(1))
    if not response.content:
        return 0
    return len(response.json() or [])


def detect_oracle_signal(paths: Sequence[str]) -> Optional[OracleSignal]:
    """
    Oracle hints from repository file paths.

    Returns None when no path looks oracle-related (no signal).
    """
    lowered = [path.lower() for path in paths]
    oracle_paths = [p for p in lowered if any(k in p for k in ORACLE_PATH_KEYWORDS)]
    provider = next(
        (name for name in RELIABLE_ORACLE_PROVIDERS if any(name in p for p in lowered)),
        None,
    )
    if not oracle_paths and provider is None:
        return None

    multiple = len(oracle_paths) > 1
    admin_controlled = any(
        keyword in p.rsplit("/", 1)[-1] for p in oracle_paths for keyword in CENTRALIZED_PATH_KEYWORDS
    )
    return OracleSignal(
        uses_reliable_provider=provider is not None,
        provider=provider,
        has_multiple_oracles=multiple,
        has_timelock=any(k in p for p in lowered for k in TIMELOCK_PATH_KEYWORDS),
        has_price_deviation=any(k in p for p in oracle_paths for k in PRICE_DEVIATION_PATH_KEYWORDS),
        centralized=not multiple or admin_controlled,
    )


def _has_security_policy(owner: str, repo: str, paths: Sequence[str]) -> bool:
    if paths:
        return any(path in SECURITY_POLICY_PATHS for path in paths)
    try:
        _api(f"/repos/{owner}/{repo}/contents/SECURITY.md")
    except ProviderError as e:
        if e.status_code == 404:
            return False
        raise
    return True


def fetch_repo_activity(repo_url: str, files: Optional[Sequence[RepoFile]] = None) -> RepoActivity:
    """
    Development activity for a repository.

    Args:
        repo_url: github.com repository URL
        files: Listing from list_repo_files, used for the security policy
            check and the oracle heuristics

    Returns:
        RepoActivity (recent_commits counts the latest page of 30 commits)
    """
    owner, repo = parse_repo_url(repo_url)
    paths = [f.path for f in files or []]

    commits = get_json(
        f"{GITHUB_API_URL}/repos/{owner}/{repo}/commits", PROVIDER, params={"per_page": 30}, headers=_headers()
    )
    contributors = _api(f"/repos/{owner}/{repo}/contributors", {"per_page": 1, "anon": "true"})
    issues = _api(f"/repos/{owner}/{repo}/issues", {"state": "open", "per_page": 1})

    activity = RepoActivity(
        recent_commits=len(commits or []),
        contributor_count=count_from_link_header(contributors),
        open_issues=count_from_link_header(issues),
        has_security_policy=_has_security_policy(owner, repo, paths),
        oracle=detect_oracle_signal(paths),
    )
    logger.debug(
        "repo_activity_fetched",
        repo=f"{owner}/{repo}",
        commits=activity.recent_commits,
        contributors=activity.contributor_count,
    )
    return activity
