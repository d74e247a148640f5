"""Request interception: decide per request whether a stage lets it through."""

from __future__ import annotations

import logging

from playwright.async_api import Page, Route

from initial_rendering.models.stages import InterceptionPolicy

logger = logging.getLogger(__name__)

_SCRIPT_AND_STYLE = frozenset({"script", "stylesheet"})


def should_abort(policy: InterceptionPolicy, resource_type: str) -> bool:
    """Return True when ``policy`` excludes requests of ``resource_type``."""
    if policy is InterceptionPolicy.DOCUMENT_ONLY:
        return resource_type != "document"
    if policy is InterceptionPolicy.NO_SCRIPT_OR_STYLE:
        return resource_type in _SCRIPT_AND_STYLE
    return False


async def install_interception(page: Page, policy: InterceptionPolicy) -> bool:
    """Route every request of ``page`` through ``policy``.

    Nothing is installed for the unrestricted policy. Returns whether a route
    handler was registered.
    """
    if policy is InterceptionPolicy.UNRESTRICTED:
        return False

    async def _handle(route: Route) -> None:
        request = route.request
        if should_abort(policy, request.resource_type):
            logger.debug("[%s] abort %s %s", policy.value, request.resource_type, request.url)
            await route.abort()
        else:
            await route.continue_()

    await page.route("**/*", _handle)
    return True
