"""Immutable snapshot of a chat session's state."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .api import Message, assistant_message, error_message, system_message


@dataclass(frozen=True)
class Session:
    """Conversation history, the message being streamed and the last error."""

    prompt: Message = field(default_factory=lambda: system_message(""))
    history: Tuple[Message, ...] = ()
    in_progress: Message = field(default_factory=lambda: assistant_message(""))
    error: Optional[BaseException] = None
    running: bool = False

    def has_messages(self) -> bool:
        """Report whether there is anything to show."""
        return (
            bool(self.history)
            or self.error is not None
            or (self.is_running() and self.in_progress.text != "")
        )

    def messages(self) -> List[Message]:
        """Return the messages to display, including partial output and errors."""
        result = list(self.history)
        if self.is_running() and self.in_progress.text != "":
            result.append(self.in_progress)
        if self.error is not None:
            result.append(error_message(str(self.error)))
        return result

    def system_prompt(self) -> Message:
        return self.prompt

    def is_running(self) -> bool:
        return self.running