"""Gathers resource metadata from a running host.

Every resource publishes a template at ``<link>/template``; those are fetched
concurrently. A failing resource is recorded in ``BatchResult.errors`` and
never affects the others.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from urllib.parse import urlparse

import requests

from api_doc_assembler.errors import MetadataError
from api_doc_assembler.metadata.base import TEMPLATE_SUFFIX, BatchResult, ResourceMetadata

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10
DEFAULT_WORKERS = 8
JSON_HEADERS = {"Accept": "application/json"}


def list_links(session: requests.Session, base_url: str, timeout: float = DEFAULT_TIMEOUT) -> list[str]:
    """Service links listed by the host's root namespace."""
    try:
        resp = session.get(f"{base_url}/", headers=JSON_HEADERS, timeout=timeout)
        resp.raise_for_status()
        links = resp.json().get("documentLinks", [])
    except (requests.RequestException, ValueError, AttributeError) as e:
        raise MetadataError(f"Cannot list services of {base_url}: {e}") from e
    return sorted(links)


def fetch_template(
    session: requests.Session, base_url: str, link: str, timeout: float = DEFAULT_TIMEOUT
) -> ResourceMetadata:
    resp = session.get(f"{base_url}{link}{TEMPLATE_SUFFIX}", headers=JSON_HEADERS, timeout=timeout)
    resp.raise_for_status()
    body = resp.json()
    if not isinstance(body, dict):
        raise ValueError(f"unexpected template body for {link}")
    return ResourceMetadata.model_validate({**body, "path": link})


def collect_metadata(
    base_url: str,
    links: list[str] | None = None,
    session: requests.Session | None = None,
    max_workers: int = DEFAULT_WORKERS,
    timeout: float = DEFAULT_TIMEOUT,
) -> BatchResult:
    """Fetch the template of every link (all listed services by default).

    A session is created and closed here unless the caller passes one.
    """
    if session is None:
        with requests.Session() as owned:
            return collect_metadata(base_url, links, owned, max_workers, timeout)

    base_url = base_url.rstrip("/")
    if links is None:
        links = list_links(session, base_url, timeout)
    logger.info("Fetching metadata of %d resources from %s", len(links), base_url)

    resources: dict[str, ResourceMetadata] = {}
    errors: dict[str, str] = {}
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = {
            pool.submit(fetch_template, session, base_url, link, timeout): link for link in links
        }
        for future in as_completed(futures):
            link = futures[future]
            try:
                resources[link] = future.result()
            except (requests.RequestException, ValueError) as e:
                logger.warning("Cannot fetch metadata of %s: %s", link, e)
                errors[link] = str(e)

    return BatchResult(
        host=urlparse(base_url).netloc or None,
        resources=dict(sorted(resources.items())),
        errors=dict(sorted(errors.items())),
    )
