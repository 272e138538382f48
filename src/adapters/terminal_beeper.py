"""AlertPort that rings the terminal bell."""

from __future__ import annotations

import sys
from typing import TextIO


class TerminalBeeper:
    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream or sys.stdout

    def beep(self) -> None:
        self._stream.write("\a")
        self._stream.flush()
