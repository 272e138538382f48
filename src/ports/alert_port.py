"""Alert port — abstract interface for the audible ringing signal."""

from __future__ import annotations

from typing import Protocol


class AlertPort(Protocol):
    """Plays one short alert sound. Called repeatedly by the alert loop."""

    def beep(self) -> None: ...
