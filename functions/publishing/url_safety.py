# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================
"""Deny-list safety check for links attached to published items."""

import logging
import re
from typing import Iterable, Optional
from urllib.parse import urlsplit

from shared.constants import DEFAULT_BLACKLISTED_DOMAINS
from shared.types import UrlCheckResult

logger = logging.getLogger(__name__)

BLACKLISTED_REASON = "Domain blacklisted"
UNCHECKED_REASON = "URL could not be checked"

# A scheme counts only when followed by a slash, so "example.com:8080" is a host.
_SCHEME_PATTERN = re.compile(r"^([a-z][a-z0-9+.-]*):(?=[/\\])", re.IGNORECASE)
_WEB_SCHEMES = ("http", "https")


def extract_host(url: str) -> Optional[str]:
    """
    Returns the lower-cased host of `url`, assuming https when no scheme is given.

    Schemes match case-insensitively. For http(s), any run of slashes or
    backslashes after the colon is read as "//", the way browsers resolve it.

    Raises:
        ValueError: If the URL cannot be parsed.
    """
    candidate = url.strip()
    match = _SCHEME_PATTERN.match(candidate)
    if not match:
        candidate = f"https://{candidate}"
    elif match.group(1).lower() in _WEB_SCHEMES:
        rest = candidate[match.end() :].lstrip("/\\")
        candidate = f"{match.group(1).lower()}://{rest}"
    hostname = urlsplit(candidate).hostname
    return hostname.lower() if hostname else None


def check_url_safety(
    url: Optional[str],
    deny_list: Iterable[str] = DEFAULT_BLACKLISTED_DOMAINS,
    fail_open: bool = True,
) -> UrlCheckResult:
    """
    Checks a link against the domain deny-list.

    A host is rejected when any deny-list entry is a substring of it. URLs
    that cannot be parsed are allowed with a warning when `fail_open` is set,
    and rejected otherwise.

    Args:
        url (Optional[str]): The link to check; empty means nothing to check.
        deny_list (Iterable[str]): Known bad domains.
        fail_open (bool): Policy for URLs that cannot be parsed.

    Returns:
        UrlCheckResult: Whether the link is safe and whether it was checked.
    """
    if not url or not url.strip():
        return UrlCheckResult(safe=True, checked=False)

    try:
        host = extract_host(url)
        if not host:
            raise ValueError("URL has no host")
    except ValueError as e:
        if fail_open:
            logger.warning(f"[URL Safety] Failed to check URL {url!r}: {e}")
            return UrlCheckResult(
                safe=True, checked=False, warning="URL check failed, allowing"
            )
        logger.warning(f"[URL Safety] Rejecting unparseable URL {url!r}: {e}")
        return UrlCheckResult(safe=False, checked=False, reason=UNCHECKED_REASON)

    if any(bad and bad.lower() in host for bad in deny_list):
        return UrlCheckResult(safe=False, checked=True, reason=BLACKLISTED_REASON)

    logger.info(f"[URL Safety] URL checked (blacklist only): {url}")
    return UrlCheckResult(safe=True, checked=True)
