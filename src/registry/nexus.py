"""Nexus registry existence checks for project and dependency versions."""
from __future__ import annotations

import json
import logging
from pathlib import PurePosixPath
from typing import Optional
from urllib.parse import quote

from constants import Constants
from common import http_client
from common.errors import RegistryCheckError
from common.logging_utils import extra_context, is_debug_enabled, safe_url

logger = logging.getLogger(__name__)


def registry_name_for(relative_path: str) -> str:
    """Name a project is published under, given its path below the scan root.

    Nested subprojects are published under their containing project, so
    ``ascent-platform/ascent-platform-parent`` maps to ``ascent-platform``.
    """
    path = PurePosixPath(relative_path)
    if len(path.parts) > 1:
        return str(path.parent)
    return str(path)


def make_nexus_url(base_url: str, name: str, version: str) -> str:
    """Build the Nexus search URL for a name/version pair."""
    query = (
        "name.raw%3D" + quote(name, safe="/")
        + "%20AND%20attributes.maven2.baseVersion%3D" + quote(version, safe="")
    )
    return base_url + query


class NexusArtifactChecker:
    """Answers whether a given artifact version is published in Nexus.

    Args:
        base_url: The projects search URL; the query string is appended to it.
        timeout: Per-request timeout in seconds.
        retries: Attempts before giving up on a request.
    """

    def __init__(self, base_url: str, timeout: float = Constants.REQUEST_TIMEOUT,
                 retries: int = Constants.HTTP_RETRY_MAX):
        self.base_url = base_url
        self.timeout = timeout
        self.retries = retries

    def exists(self, name: str, version: str) -> bool:
        """Return True if ``name`` at ``version`` is found in the registry.

        Raises:
            RegistryCheckError: on timeout, connection failure or a non-2xx
                response. Callers treat that as "unknown", not "missing".
        """
        url = make_nexus_url(self.base_url, name, version)
        status, _, text = http_client.robust_get(
            url,
            headers={"Accept": "application/json"},
            timeout=self.timeout,
            retries=self.retries,
        )
        if status == 0:
            raise RegistryCheckError(f"{name} {version}: {text}")
        if not 200 <= status < 300:
            raise RegistryCheckError(
                f"{name} {version}: HTTP {status} from {safe_url(url)}"
            )

        found = _items_found(text)
        if is_debug_enabled(logger):
            logger.debug(
                "Registry existence check",
                extra=extra_context(
                    event="registry_check",
                    component="nexus",
                    action="exists",
                    outcome="found" if found else "not_found",
                    status_code=status,
                    target=safe_url(url),
                )
            )
        return found


def _items_found(text: Optional[str]) -> bool:
    """Interpret a 2xx body.

    The Nexus search API answers with ``{"items": [...]}``; an empty list means
    the version is not published. Any other body only tells us the lookup
    succeeded.
    """
    if not text:
        return True
    try:
        payload = json.loads(text)
    except ValueError:
        return True
    if isinstance(payload, dict) and isinstance(payload.get("items"), list):
        return bool(payload["items"])
    return True
