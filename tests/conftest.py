"""Pytest configuration and shared fixtures."""

import io
from typing import Awaitable, Callable, Optional

import pytest
from PIL import Image, ImageDraw

from initial_rendering.capture.devices import DeviceRegistry
from initial_rendering.models.config import HttpCredentials, RenderingConfig
from initial_rendering.models.report import StageResult
from initial_rendering.models.stages import Stage


# ============================================================================
# Image helpers
# ============================================================================

PAGE_SIZE = (8, 8)
RESOURCE_TYPES = ("document", "stylesheet", "script", "image", "font")

WHITE = (255, 255, 255, 255)
BLACK = (0, 0, 0, 255)


def solid_image(size=PAGE_SIZE, color=WHITE) -> Image.Image:
    return Image.new("RGBA", size, color)


def png_bytes(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def render_page(aborted: set, size=PAGE_SIZE) -> Image.Image:
    """Simulated page: blocked scripts blank the top two rows, blocked images the bottom two."""
    width, height = size
    img = solid_image(size)
    draw = ImageDraw.Draw(img)
    if "script" in aborted:
        draw.rectangle([0, 0, width - 1, 1], fill=BLACK)
    if "image" in aborted:
        draw.rectangle([0, height - 2, width - 1, height - 1], fill=BLACK)
    return img


# ============================================================================
# Fake Playwright
# ============================================================================

# Subset of ``playwright.devices`` in its Python descriptor shape
PLAYWRIGHT_DEVICES = {
    "iPhone 6": {
        "user_agent": "Mozilla/5.0 (iPhone; CPU iPhone OS 11_0 like Mac OS X) Mobile/15A372 Safari/604.1",
        "viewport": {"width": 375, "height": 667},
        "device_scale_factor": 2,
        "is_mobile": True,
        "has_touch": True,
        "default_browser_type": "webkit",
    },
    "Galaxy Tab S4": {
        "user_agent": "Mozilla/5.0 (Linux; Android 8.1.0; SM-T837A) Safari/537.36",
        "viewport": {"width": 712, "height": 1138},
        "device_scale_factor": 2.25,
        "is_mobile": True,
        "has_touch": True,
        "default_browser_type": "chromium",
    },
}


class FakeRequest:
    def __init__(self, resource_type: str, url: str):
        self.resource_type = resource_type
        self.url = url


class FakeRoute:
    def __init__(self, resource_type: str, url: str):
        self.request = FakeRequest(resource_type, url)
        self.action: Optional[str] = None

    async def abort(self) -> None:
        self.action = "abort"

    async def continue_(self) -> None:
        self.action = "continue"


class FakePage:
    def __init__(self, browser: "FakeBrowser"):
        self.browser = browser
        self.route_pattern: Optional[str] = None
        self.handler = None
        self.aborted: set = set()
        self.goto_kwargs: dict = {}
        self.waited: list = []
        self.screenshot_kwargs: dict = {}

    async def route(self, pattern, handler) -> None:
        self.route_pattern = pattern
        self.handler = handler

    async def goto(self, url: str, **kwargs) -> None:
        self.browser.goto_urls.append(url)
        self.goto_kwargs = kwargs
        if self.browser.owner.goto_hook is not None:
            await self.browser.owner.goto_hook(self.browser)
        if self.handler is not None:
            for resource_type in RESOURCE_TYPES:
                route = FakeRoute(resource_type, f"{url}/{resource_type}")
                await self.handler(route)
                if route.action == "abort":
                    self.aborted.add(resource_type)

    async def wait_for_timeout(self, ms: int) -> None:
        self.waited.append(ms)

    async def screenshot(self, **kwargs) -> bytes:
        self.screenshot_kwargs = kwargs
        return self.browser.owner.screenshot(self)


class FakeContext:
    def __init__(self, browser: "FakeBrowser", options: dict):
        self.browser = browser
        self.options = options
        self.pages: list = []

    async def new_page(self) -> FakePage:
        page = FakePage(self.browser)
        self.pages.append(page)
        return page


class FakeBrowser:
    def __init__(self, owner: "FakePlaywright", options: dict):
        self.owner = owner
        self.options = options
        self.contexts: list = []
        self.goto_urls: list = []
        self.closed = False

    async def new_context(self, **kwargs) -> FakeContext:
        context = FakeContext(self, kwargs)
        self.contexts.append(context)
        return context

    async def close(self) -> None:
        self.closed = True

    @property
    def page(self) -> FakePage:
        return self.contexts[0].pages[0]


class FakeChromium:
    def __init__(self, owner: "FakePlaywright"):
        self.owner = owner
        self.launched: list = []

    async def launch(self, **options) -> FakeBrowser:
        if self.owner.launch_error is not None:
            raise self.owner.launch_error
        browser = FakeBrowser(self.owner, options)
        self.launched.append(browser)
        return browser


class FakePlaywright:
    """Stands in for ``async_playwright``: calling it returns an async context manager."""

    def __init__(self):
        self.chromium = FakeChromium(self)
        self.launch_error: Optional[Exception] = None
        self.goto_hook: Optional[Callable[[FakeBrowser], Awaitable[None]]] = None
        self.render: Callable[[set], Image.Image] = render_page
        self.screenshot_data: Optional[bytes] = None
        # Render at viewport * device_scale_factor instead of PAGE_SIZE
        self.emulate_viewport = False
        self.start_error: Optional[Exception] = None
        self.devices: dict = dict(PLAYWRIGHT_DEVICES)
        self.entered = 0

    def __call__(self) -> "FakePlaywright":
        return self

    async def __aenter__(self) -> "FakePlaywright":
        if self.start_error is not None:
            raise self.start_error
        self.entered += 1
        return self

    async def __aexit__(self, *exc) -> bool:
        return False

    @property
    def launched(self) -> list:
        return self.chromium.launched

    def screenshot(self, page: FakePage) -> bytes:
        if self.screenshot_data is not None:
            return self.screenshot_data
        if self.emulate_viewport:
            options = page.browser.contexts[0].options
            scale = options["device_scale_factor"]
            size = (
                round(options["viewport"]["width"] * scale),
                round(options["viewport"]["height"] * scale),
            )
            return png_bytes(render_page(page.aborted, size=size))
        return png_bytes(self.render(page.aborted))


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def fake_playwright() -> FakePlaywright:
    return FakePlaywright()


@pytest.fixture
def device_registry() -> DeviceRegistry:
    return DeviceRegistry.default()


@pytest.fixture
def rendering_config() -> RenderingConfig:
    """Rendering config without images, for fast runs."""
    return RenderingConfig(
        url="https://example.com",
        device="Nexus 5X",
        return_screenshots=False,
    )


@pytest.fixture
def auth_rendering_config() -> RenderingConfig:
    return RenderingConfig(
        url="https://example.com/private",
        auth=HttpCredentials(username="foo", password="bar"),
        browser_launch_options={"executable_path": "/usr/bin/chromium-browser"},
    )


@pytest.fixture
def identical_stages() -> list:
    return [StageResult(stage=s, image=solid_image()) for s in (Stage.INITIAL, Stage.NO_ASSETS, Stage.FULL)]


@pytest.fixture
def progressive_stages() -> list:
    """Stages as the simulated page renders them under each policy."""
    return [
        StageResult(stage=Stage.INITIAL, image=render_page({"stylesheet", "script", "image", "font"})),
        StageResult(stage=Stage.NO_ASSETS, image=render_page({"stylesheet", "script"})),
        StageResult(stage=Stage.FULL, image=render_page(set())),
    ]
