"""Shared helpers for the page controllers."""

from dataclasses import dataclass

from litestar import Request
from litestar.exceptions import NotAuthorizedException

from folio.config import HeroSlideDefault, get_settings

# Session keys written by the sign-in flow
SESSION_USER_ID = "user_id"
SESSION_USER_SLUG = "user_slug"


@dataclass(frozen=True)
class Owner:
    """The signed-in page owner."""

    id: str
    slug: str


def get_owner(request: Request) -> Owner:
    """Read the owner identity from the session, raising 401 when absent."""
    user_id = request.session.get(SESSION_USER_ID)
    slug = request.session.get(SESSION_USER_SLUG)
    if not user_id or not slug:
        raise NotAuthorizedException("You must be logged in to edit your page")
    return Owner(id=str(user_id), slug=str(slug))


def default_hero_slides(request: Request) -> list[HeroSlideDefault]:
    settings = getattr(request.app.state, "settings", None) or get_settings()
    return settings.pages.default_hero_slides
