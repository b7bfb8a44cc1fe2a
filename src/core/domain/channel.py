"""Release channels.

The listing API mixes dated stable releases (`YYYY-MM-DD` tags) with a single
rolling release tagged `nightly`. Keeping the selector in the domain layer
lets the CLI and the orchestrator share it without importing adapters.
"""

from __future__ import annotations

from enum import Enum

NIGHTLY_TAG = "nightly"


class Channel(str, Enum):
    """Release stream selector."""

    STABLE = "stable"
    NIGHTLY = "nightly"

    def accepts(self, tag: str) -> bool:
        """Whether a release tag belongs to this channel."""

        if self is Channel.NIGHTLY:
            return tag == NIGHTLY_TAG
        return tag != NIGHTLY_TAG

    def label(self) -> str:
        return "nightly" if self is Channel.NIGHTLY else "stable"
