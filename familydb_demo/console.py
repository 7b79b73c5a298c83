# SPDX-License-Identifier: MIT
# Copyright (c) 2025 FamilyDB contributors

"""Console output and pacing for the walkthrough."""

import sys
from collections.abc import Callable
from typing import TextIO

CONTINUE_PROMPT = "Press Enter to continue ... \n\n"


class Console:
    """Prints status lines and, when interactive, waits for Enter after each step."""

    def __init__(
        self,
        interactive: bool = True,
        stream: TextIO | None = None,
        input_fn: Callable[[str], str] = input,
    ):
        self.interactive = interactive
        self.stream = stream or sys.stdout
        self._input = input_fn

    def write(self, message: str) -> None:
        print(message, file=self.stream, flush=True)

    def pause(self, prompt: str = CONTINUE_PROMPT) -> None:
        if not self.interactive:
            return
        try:
            self._input(prompt)
        except EOFError:
            # stdin closed: carry on without pacing
            self.interactive = False

    def write_and_prompt(self, message: str) -> None:
        """Print a status line, then pause for the reader."""
        self.write(message)
        self.pause()
