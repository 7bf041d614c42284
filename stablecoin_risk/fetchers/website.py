"""
Website Fetcher - issuer transparency scraper.

Scrapes the issuer's homepage for transparency indicators:
- Proof of Reserves provider (Armanino, Chainlink, Merkle...)
- Reserves dashboard / PoR link
- Reporting frequency keyword
- "Last updated" date
- Transparency / attestation page link
- Reserve composition tables

The signal's base score is 2.0 plus one bonus per indicator found, capped
at 5.0. Any fetch or parse failure yields TransparencySignal.unavailable().
"""

import re
from typing import List, Optional, Tuple
from urllib.parse import urljoin

import pandas as pd
from bs4 import BeautifulSoup

from ..config.settings import WEB_TIMEOUT_SECONDS
from ..core.logging_utils import get_logger
from ..core.models import ReserveHolding, TransparencySignal
from ..thresholds import POR_PROVIDERS, SCORE_MAX, TRANSPARENCY_SCORING
from .http import get_response

logger = get_logger(__name__)

PROVIDER = "website"

UPDATE_FREQUENCIES = (
    (("real-time", "live"), "Real-time"),
    (("daily",), "Daily"),
    (("weekly",), "Weekly"),
    (("monthly",), "Monthly"),
)
LAST_UPDATED_PATTERN = re.compile(r"last updated:?\s*([\w\s,]+\d{4})", re.IGNORECASE)
POR_LINK_PATTERN = re.compile(r"proof of reserve|\bpor\b|reserves dashboard")
TRANSPARENCY_LINK_KEYWORDS = ("transparency", "attestation", "audit report")


def normalize_url(url: str) -> str:
    url = url.strip()
    return url if url.startswith("http") else f"https://{url}"


def fetch_page(url: str, timeout: float = WEB_TIMEOUT_SECONDS) -> str:
    """Fetch a web page as text with a browser User-Agent."""
    response = get_response(
        normalize_url(url),
        PROVIDER,
        headers={"Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"},
        timeout=timeout,
        max_retries=0,
    )
    return response.text


class TransparencyScraper:
    """Extracts transparency indicators from one HTML page."""

    def __init__(self, html: str, base_url: str):
        self.base_url = normalize_url(base_url)
        self.soup = BeautifulSoup(html, "html.parser")
        self.text = self.soup.get_text(" ")
        self.lowered = self.text.lower()

    def _links(self) -> List[Tuple[str, str]]:
        return [
            (anchor["href"], anchor.get_text(" ").strip().lower())
            for anchor in self.soup.find_all("a", href=True)
        ]

    def por_provider(self) -> Optional[str]:
        for provider in POR_PROVIDERS:
            if provider in self.lowered:
                return provider[0].upper() + provider[1:]
        return None

    def por_url(self) -> Optional[str]:
        for href, text in self._links():
            if POR_LINK_PATTERN.search(text):
                return urljoin(self.base_url, href)
        return None

    def update_frequency(self) -> Optional[str]:
        for keywords, label in UPDATE_FREQUENCIES:
            if any(keyword in self.lowered for keyword in keywords):
                return label
        return None

    def last_update(self) -> Optional[str]:
        """ISO date of the 'last updated' stamp, when it parses."""
        match = LAST_UPDATED_PATTERN.search(self.text)
        if not match:
            return None
        parsed = pd.to_datetime(match.group(1).strip(), errors="coerce")
        if pd.isna(parsed):
            return None
        return parsed.date().isoformat()

    def transparency_url(self) -> Optional[str]:
        for href, text in self._links():
            if any(keyword in text for keyword in TRANSPARENCY_LINK_KEYWORDS):
                return urljoin(self.base_url, href)
        return None

    def reserves(self) -> Tuple[ReserveHolding, ...]:
        """(asset, percentage) rows from any table whose second cell is numeric."""
        holdings = []
        for row in self.soup.select("table tr"):
            cells = row.find_all("td")
            if len(cells) < 2:
                continue
            asset = cells[0].get_text(" ").strip()
            try:
                percentage = float(cells[1].get_text().replace("%", "").replace(",", "").strip())
            except ValueError:
                continue
            if asset:
                holdings.append(ReserveHolding(asset=asset, percentage=percentage))
        return tuple(holdings)

    def signal(self) -> TransparencySignal:
        provider = self.por_provider()
        por_url = self.por_url()
        frequency = self.update_frequency()
        last_update = self.last_update()
        transparency_url = self.transparency_url()
        reserves = self.reserves()

        config = TRANSPARENCY_SCORING
        score = config["analyzer_base"]
        if provider:
            score += config["analyzer_por_provider"]
        if por_url:
            score += config["analyzer_por_url"]
        if frequency:
            score += config["analyzer_update_frequency"]
        if last_update:
            score += config["analyzer_last_update"]
        if transparency_url:
            score += config["analyzer_transparency_page"]

        return TransparencySignal(
            score=min(score, SCORE_MAX),
            has_transparency_page=transparency_url is not None,
            has_reserves_dashboard=por_url is not None,
            has_regular_reporting=frequency is not None,
            details=transparency_details(provider, frequency, last_update, reserves),
            por_provider=provider,
            por_url=por_url,
            update_frequency=frequency,
            last_update=last_update,
            transparency_url=transparency_url,
            reserves=reserves,
        )


def transparency_details(provider, frequency, last_update, reserves) -> Tuple[str, ...]:
    details = []
    if provider:
        details.append(f"Proof of Reserves provided by {provider}")
    if frequency:
        details.append(f"Reserve data updated {frequency.lower()}")
    if last_update:
        details.append(f"Last update: {last_update}")
    if reserves:
        details.append(f"Reserve composition available with {len(reserves)} assets")
    if not details:
        details = ["Limited transparency information available", "Consider requesting more detailed disclosures"]
    return tuple(details)


def check_transparency(url: str) -> TransparencySignal:
    """
    Scrape the issuer website for transparency indicators.

    Never raises: an unreachable or unparseable site degrades to
    TransparencySignal.unavailable().
    """
    if not url:
        return TransparencySignal.unavailable()
    try:
        html = fetch_page(url)
        signal = TransparencyScraper(html, url).signal()
    except Exception as e:
        logger.warning("transparency_check_failed", url=url, error=str(e))
        return TransparencySignal.unavailable()

    logger.debug("transparency_checked", url=url, score=signal.score)
    return signal
