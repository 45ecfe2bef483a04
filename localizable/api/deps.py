# File: localizable/api/deps.py
"""
Dependency providers for the localization API.
"""

import logging
from typing import List, Optional, Tuple

from fastapi import Depends, Header, Query
from sqlalchemy.orm import Session

from localizable.core.config import settings
from localizable.db.session import get_db
from localizable.services.localization_service import LocalizationService

logger = logging.getLogger(__name__)


def get_localization_service(db: Session = Depends(get_db)) -> LocalizationService:
    """Provide a LocalizationService bound to the request's session."""
    return LocalizationService(db)


def parse_accept_language(header: Optional[str]) -> List[str]:
    """
    Language tags from an Accept-Language header, highest quality first.

    Tags with q=0 are dropped; ties keep header order.
    """
    if not header:
        return []

    weighted: List[Tuple[float, int, str]] = []
    for position, part in enumerate(header.split(",")):
        pieces = [p.strip() for p in part.split(";")]
        tag = pieces[0]
        if not tag or tag == "*":
            continue
        quality = 1.0
        for param in pieces[1:]:
            if param.startswith("q="):
                try:
                    quality = float(param[2:])
                except ValueError:
                    quality = 0.0
        if quality > 0:
            weighted.append((-quality, position, tag))

    return [tag for _, _, tag in sorted(weighted)]


def get_request_locale(
        locale: Optional[str] = Query(None, description="Locale code (e.g., 'en', 'fr')"),
        accept_language: Optional[str] = Header(None),
) -> str:
    """
    Pick the locale for a request.

    An explicit ``locale`` query parameter wins; otherwise the first
    Accept-Language tag matching a configured locale, by exact code or by
    primary subtag; otherwise DEFAULT_LOCALE.
    """
    if locale:
        return locale

    supported = settings.LOCALES
    for tag in parse_accept_language(accept_language):
        if tag in supported:
            return tag
        primary = tag.split("-")[0].lower()
        if primary in supported:
            return primary

    return settings.DEFAULT_LOCALE
