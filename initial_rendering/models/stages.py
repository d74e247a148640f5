"""Capture stages and the request interception policy each one runs under."""

from __future__ import annotations

from enum import Enum


class Stage(str, Enum):
    INITIAL = "initial"
    NO_ASSETS = "no-assets"
    FULL = "full"


class InterceptionPolicy(str, Enum):
    DOCUMENT_ONLY = "document-only"
    NO_SCRIPT_OR_STYLE = "no-script-or-style"
    UNRESTRICTED = "unrestricted"


# Ground truth is always the last stage.
CAPTURE_ORDER: tuple[Stage, ...] = (Stage.INITIAL, Stage.NO_ASSETS, Stage.FULL)

STAGE_POLICIES: dict[Stage, InterceptionPolicy] = {
    Stage.INITIAL: InterceptionPolicy.DOCUMENT_ONLY,
    Stage.NO_ASSETS: InterceptionPolicy.NO_SCRIPT_OR_STYLE,
    Stage.FULL: InterceptionPolicy.UNRESTRICTED,
}
