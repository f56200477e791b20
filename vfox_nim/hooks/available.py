"""
Available hook: installable stable Nim versions.
"""

import logging
import re
from typing import Any, Dict, List, Mapping, Optional

from vfox_nim.core.exceptions import VfoxNimError
from vfox_nim.hooks.context import PluginServices

logger = logging.getLogger(__name__)

NIM_TAGS_API = "https://api.github.com/repos/nim-lang/Nim/tags"
TAGS_PAGE_SIZE = 100

_RELEASE_RE = re.compile(r"[0-9]+\.[0-9]+\.[0-9]+")


def release_versions(tags: Any) -> List[str]:
    """
    Stable versions from a GitHub tags listing.

    The leading 'v' is stripped and anything that is not X.Y.Z afterwards
    is dropped. Ref versions are never listed; they are installed by name.
    """
    versions = []
    if not isinstance(tags, list):
        return versions

    for tag in tags:
        name = tag.get("name") if isinstance(tag, dict) else None
        if not isinstance(name, str):
            continue
        version = name[1:] if name.startswith("v") else name
        if _RELEASE_RE.fullmatch(version):
            versions.append(version)
    return versions


def available(
    ctx: Optional[Mapping[str, Any]] = None,
    services: Optional[PluginServices] = None,
) -> List[Dict[str, str]]:
    """
    List installable versions.

    Listing is advisory: any failure yields an empty list.

    Returns:
        [{'version': '2.2.4'}, ...] in the order the API returns tags
    """
    if services is None:
        try:
            services = PluginServices.from_settings()
        except VfoxNimError as e:
            logger.warning(f"Could not list Nim versions: {e}")
            return []

    tags = services.http.get_json(NIM_TAGS_API, params={"per_page": TAGS_PAGE_SIZE})
    if tags is None:
        logger.warning("Could not list Nim versions")
        return []

    versions = release_versions(tags)
    logger.debug(f"Found {len(versions)} Nim releases")
    return [{"version": v} for v in versions]


__all__ = ["available", "release_versions", "NIM_TAGS_API"]
