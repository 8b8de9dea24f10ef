"""Site classification of job-posting URLs.

Precedence, first match wins:

1. ``/<board-token>/jobs/<digits>`` on a hosted Greenhouse board, or a path
   ending in ``/jobs/<board-token>/<digits>`` on any host not claimed by a
   known site -> direct Greenhouse
2. a ``gh_jid`` query parameter -> embedded Greenhouse; the board token is
   looked up in sibling frame URLs (``...greenhouse.io...?for=<token>``)
3. known host substrings -> Wellfound, RemoteRocketship, LinkedIn
4. anything else, including malformed URLs -> generic
"""

import re
from typing import Iterable, Optional
from urllib.parse import parse_qs, urlsplit

from extractor.domain.models import SiteIdentity, SiteKind
from extractor.logging import get_logger
from extractor.rules.tables import HostTable, default_site_tables

logger = get_logger(__name__, component="classification")

GREENHOUSE_JOB_PATH = re.compile(r"^/(?:embed/)?(?P<token>[A-Za-z0-9_.-]+)/jobs/(?P<job_id>\d+)/?$")
JOBS_TOKEN_PATH = re.compile(r"/jobs/(?P<token>[A-Za-z0-9_.-]+)/(?P<job_id>\d+)/?$")
GREENHOUSE_JOB_PARAM = "gh_jid"
GREENHOUSE_TOKEN_PARAM = "for"


def _split(url: str):
    try:
        parts = urlsplit((url or "").strip())
        # Accessing .port validates it; a bad port raises ValueError here
        parts.port
    except ValueError:
        return None
    if not parts.scheme or not parts.hostname:
        return None
    return parts


def resolve_board_token(frame_urls: Iterable[str], hosts: Optional[HostTable] = None) -> Optional[str]:
    """
    Find a Greenhouse board token among frame URLs.

    Args:
        frame_urls: URLs of the frames nested in the page, in document order
        hosts: Host table (bundled table when omitted)

    Returns:
        The ``for=`` value of the first Greenhouse-hosted frame carrying one, or None
    """
    hosts = hosts or default_site_tables().hosts
    for frame_url in frame_urls:
        parts = _split(frame_url)
        if parts is None or not hosts.is_frame_host(parts.hostname):
            continue
        values = parse_qs(parts.query).get(GREENHOUSE_TOKEN_PARAM)
        if values and values[0].strip():
            return values[0].strip()
    return None


def classify(
    url: str,
    sibling_frame_urls: Iterable[str] = (),
    hosts: Optional[HostTable] = None,
) -> SiteIdentity:
    """
    Classify a job-posting URL.

    Never raises: anything that cannot be parsed is treated as a generic page.

    Args:
        url: Address of the top-level page
        sibling_frame_urls: Frame URLs of the same page, used to resolve the
            board token of embedded Greenhouse postings
        hosts: Host table (bundled table when omitted)

    Returns:
        SiteIdentity for the page
    """
    hosts = hosts or default_site_tables().hosts
    identity = _classify(url, sibling_frame_urls, hosts)

    logger.debug(
        f"Classified {url} as {identity.kind.value}",
        extra={
            "event": "classification.completed",
            "url": url,
            "kind": identity.kind.value,
            "board_token": identity.board_token,
            "job_id": identity.job_id,
        },
    )
    return identity


def _classify(url: str, sibling_frame_urls: Iterable[str], hosts: HostTable) -> SiteIdentity:
    parts = _split(url)
    if parts is None:
        return SiteIdentity.of(SiteKind.GENERIC)

    host = parts.hostname.lower()

    kind = hosts.kind_for_host(host)

    match = None
    if hosts.is_board_host(host):
        match = GREENHOUSE_JOB_PATH.match(parts.path)
    if match is None and kind is None:
        match = JOBS_TOKEN_PATH.search(parts.path)
    if match:
        return SiteIdentity.direct_greenhouse(match.group("token"), match.group("job_id"))

    job_ids = parse_qs(parts.query).get(GREENHOUSE_JOB_PARAM)
    if job_ids and job_ids[0].strip().isdigit():
        board_token = resolve_board_token(sibling_frame_urls, hosts)
        return SiteIdentity.embedded_greenhouse(job_ids[0].strip(), board_token=board_token)

    if kind is not None:
        return SiteIdentity.of(kind)

    return SiteIdentity.of(SiteKind.GENERIC)
