"""Free-tier domain intelligence: WHOIS age, HTTPS probe and backlink/keyword estimates."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Tuple

import requests
import tldextract

from localintel.synthetic import string_hash

logger = logging.getLogger(__name__)
_SESSION = requests.Session()
_EXTRACT = tldextract.TLDExtract(suffix_list_urls=())
_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/91.0.4472.124 Safari/537.36"
)

TLD_AGE_YEARS = {"com": 20, "net": 18, "org": 17, "co": 10, "io": 7, "app": 5, "ai": 3, "dev": 4}
DEFAULT_TLD_AGE_YEARS = 8
TLD_QUALITY = {"com": 10, "org": 8, "net": 7, "io": 6, "co": 5, "ai": 6, "dev": 6, "app": 6}
DEFAULT_TLD_QUALITY = 3
DAYS_PER_YEAR = 365.25


class DomainIntelError(RuntimeError):
    """Raised when the remote estimate service fails or returns unusable data."""


@dataclass(frozen=True)
class ProbeResult:
    status_code: int = 0
    server_type: str = "unknown"
    content_type: str = ""
    has_ssl: bool = True


@dataclass(frozen=True)
class SeoEstimate:
    backlinks: int = 0
    keywords: int = 0
    quality_score: float = 5.0
    has_estimates: bool = False


def split_domain(domain: str) -> Tuple[str, str]:
    """(registrable name label, last TLD label), e.g. ``shop.example.co.in`` -> ``("example", "in")``."""
    parts = _EXTRACT(domain)
    name = parts.domain or domain.split(".")[0]
    suffix = parts.suffix or (domain.rsplit(".", 1)[-1] if "." in domain else "")
    return name.lower(), suffix.rsplit(".", 1)[-1].lower()


def estimate_domain_age(domain: str) -> float:
    """Deterministic age guess in years from the TLD, the name length and the domain hash."""
    name, tld = split_domain(domain)
    base_age = TLD_AGE_YEARS.get(tld, DEFAULT_TLD_AGE_YEARS)
    length_factor = max(1.0, 10 - len(name) / 2)
    random_factor = (string_hash(domain) % 10) / 10
    estimated = base_age * 0.6 + length_factor * 0.3 + random_factor * base_age * 0.4
    return min(25.0, max(0.5, estimated))


def offline_estimate(domain: str) -> SeoEstimate:
    name, tld = split_domain(domain)
    tld_score = TLD_QUALITY.get(tld, DEFAULT_TLD_QUALITY)
    length_score = max(1.0, 10 - len(name) / 3)
    random_factor = (string_hash(domain) % 100) / 100
    return SeoEstimate(
        backlinks=int(100 + random_factor * 2000 + tld_score * 100 + length_score * 50),
        keywords=int(10 + random_factor * 500 + tld_score * 20 + length_score * 10),
        quality_score=tld_score + length_score + random_factor * 5,
        has_estimates=True,
    )


def _parse_created(value: Any) -> Optional[datetime]:
    if not value:
        return None
    text = str(value).strip().replace("Z", "+00:00")
    for parser in (datetime.fromisoformat, lambda raw: datetime.strptime(raw, "%Y-%m-%d %H:%M:%S")):
        try:
            created = parser(text)
        except ValueError:
            continue
        return created if created.tzinfo else created.replace(tzinfo=timezone.utc)
    logger.debug("Unrecognised WHOIS creation date: %s", value)
    return None


class DomainIntelClient:
    def __init__(
        self,
        whois_url: str = "https://api.whoapi.com/",
        whois_key: str = "free",
        estimate_url: str = "",
        timeout: float = 10,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.whois_url = whois_url
        self.whois_key = whois_key
        self.estimate_url = estimate_url
        self.timeout = timeout
        self._now = now

    def whois(self, domain: str) -> Optional[datetime]:
        """Registration date from the WHOIS service, or ``None`` when it has none."""
        params = {"apikey": self.whois_key, "r": "whois", "domain": domain}
        response = _SESSION.get(self.whois_url, params=params, timeout=self.timeout, headers={"User-Agent": _USER_AGENT})
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict):
            return None
        return _parse_created(payload.get("date_created"))

    def domain_age_years(self, domain: str) -> float:
        try:
            created = self.whois(domain)
        except (requests.RequestException, ValueError) as exc:
            logger.info("WHOIS lookup failed for %s, using estimation: %s", domain, exc)
            created = None
        if created is None:
            return estimate_domain_age(domain)
        return max(0.0, (self._now() - created).total_seconds() / 86400 / DAYS_PER_YEAR)

    def probe(self, domain: str) -> ProbeResult:
        """Fetch the HTTPS home page and record status, server and content type."""
        try:
            response = _SESSION.get(
                f"https://{domain}",
                timeout=self.timeout,
                allow_redirects=True,
                headers={"User-Agent": _USER_AGENT},
            )
        except requests.RequestException as exc:
            logger.info("Probe failed for %s: %s", domain, exc)
            return ProbeResult()
        return ProbeResult(
            status_code=response.status_code,
            server_type=response.headers.get("server") or "unknown",
            content_type=response.headers.get("content-type") or "",
            has_ssl=response.url.startswith("https") if response.url else True,
        )

    def estimate(self, domain: str) -> SeoEstimate:
        """Backlink/keyword estimate from the configured service, else the offline estimator."""
        if not self.estimate_url:
            return offline_estimate(domain)

        response = _SESSION.get(self.estimate_url, params={"domain": domain}, timeout=self.timeout)
        response.raise_for_status()
        payload: Dict[str, Any] = response.json()
        try:
            backlinks = int(payload["backlinks"])
            keywords = int(payload["keywords"])
        except (KeyError, TypeError, ValueError) as exc:
            raise DomainIntelError(f"Malformed estimate payload for {domain}") from exc
        return SeoEstimate(
            backlinks=backlinks,
            keywords=keywords,
            quality_score=float(payload.get("quality_score", 5.0)),
            has_estimates=True,
        )
