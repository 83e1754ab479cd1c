"""Route/endpoint tables and request URL resolution."""

from __future__ import annotations

import logging
from enum import Enum

from pydantic import HttpUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .errors import RouteResolutionError

logger = logging.getLogger(__name__)

DEFAULT_ALIAS = "info"


class Route(str, Enum):
    SEND = "send"
    INVOICE = "invoice"
    APPOINTMENT = "appointment"
    QUOTE = "quote"
    LEAD = "lead"
    SERVICE = "service"
    RESOLUTION = "resolution"
    AFFILIATE = "affiliate"
    CUSTOM = "custom"
    TEMPLATE = "template"


class Endpoint(str, Enum):
    NEW = "new"
    ISSUE = "issue"
    ISSUE_SIMPLE = "issue-simple"
    EXPIRED = "expired"
    CONFIRMATION = "confirmation"
    REMINDER = "reminder"
    FOLLOW = "follow"
    ONBOARDING = "onboarding"
    REVIEW = "review"
    CHECK = "check"
    FOOD = "food"
    FETCH = "fetch"
    MESSAGE_SEND = "message-send"
    DEMO = "demo"


# Mailbox local-parts per route. Routes missing here use DEFAULT_ALIAS.
ROUTE_ALIASES: dict[Route, str] = {
    Route.INVOICE: "betalingen",
    Route.APPOINTMENT: "bevestigingen",
    Route.QUOTE: "offerte",
    Route.LEAD: "relaties",
    Route.SERVICE: "relaties",
    Route.RESOLUTION: "support",
    Route.AFFILIATE: "partners",
}

_URL_ADAPTER = TypeAdapter(HttpUrl)


def alias(route: Route) -> str:
    """Return the sender alias for a route, falling back to the default alias."""
    return ROUTE_ALIASES.get(route, DEFAULT_ALIAS)


class RouteResolver:
    """Join the configured API base URL with route and endpoint path segments."""

    def __init__(self, base_url: str) -> None:
        self.base_url = str(base_url).rstrip("/")

    def resolve(self, route: Route, endpoint: Endpoint) -> str:
        route, endpoint = Route(route), Endpoint(endpoint)
        url = f"{self.base_url}/{route.value}/{endpoint.value}"
        try:
            _URL_ADAPTER.validate_python(url)
        except PydanticValidationError as exc:
            raise RouteResolutionError(f"Invalid request URL: {url}") from exc
        logger.debug("Resolved %s/%s to %s", route.value, endpoint.value, url)
        return url
