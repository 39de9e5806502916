"""
Project tracking scope.

A project registers the URLs its students work in; activity is only
accepted for URLs on one of those hosts.
"""
import logging
from urllib.parse import urlsplit

from fairgrade.errors import OutOfScope, ServiceError, StoreError

logger = logging.getLogger(__name__)


def hostname_of(url):
    """Lower-cased hostname of a URL, or '' if it has none.

    Scheme-less input such as ``docs.google.com/document/d/x`` is parsed
    as if it were ``//docs.google.com/...``.
    """
    if not url or not isinstance(url, str):
        return ""
    candidate = url.strip()
    if "://" not in candidate and not candidate.startswith("//"):
        candidate = "//" + candidate
    try:
        return urlsplit(candidate).hostname or ""
    except ValueError:
        return ""


def is_in_scope(url, registered_urls, mode="hostname"):
    """Check a candidate URL against a project's registered URLs.

    ``hostname`` mode requires the candidate's hostname to equal a
    registered hostname. ``substring`` mode accepts the candidate when its
    raw string contains a registered hostname anywhere.
    """
    hosts = [hostname_of(r.get("url")) for r in registered_urls]
    hosts = [h for h in hosts if h]
    if not hosts:
        return False

    if mode == "substring":
        return any(h in url for h in hosts)

    candidate_host = hostname_of(url)
    return bool(candidate_host) and candidate_host in hosts


def check_scope(store, project_id, url, mode="hostname"):
    """Raise unless ``url`` is inside the tracking scope of ``project_id``."""
    try:
        registered = store.list_project_urls(project_id)
    except StoreError as e:
        logger.error("[track] Error fetching project URLs for %s: %s", project_id, e)
        raise ServiceError("Failed to validate URL") from e

    if not is_in_scope(url, registered, mode):
        logger.info("[track] URL not in project scope: %s", url)
        raise OutOfScope()
