"""Terminal chat interface: message rendering, viewport, composer and footer."""

from __future__ import annotations

import io
import os
import queue
import time
from dataclasses import dataclass, field
from operator import methodcaller
from typing import Callable, Dict, List, Optional

from prompt_toolkit.application import Application, get_app
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.layout import Layout, Window
from prompt_toolkit.layout.controls import FormattedTextControl
from prompt_toolkit.styles import Style
from rich.cells import cell_len
from rich.console import Console
from rich.emoji import Emoji
from rich.markdown import Markdown

from .ai import Ai
from .api import Message, MessageType, user_message
from .config import VERSION

MIN_WIDTH = 30
MIN_HEIGHT = 10
COMPOSER_PADDING_HORIZONTAL = 1
COMPOSER_HEIGHT = 2
PLACEHOLDER = "How can I help you today?"
WELCOME = "Welcome to the AI CLI!"
FOOTER_BACKGROUND = "#5f5fd7"
SPINNER_FRAMES = ("∙∙∙", "●∙∙", "∙●∙", "∙∙●")

_EMOJIS: Dict[MessageType, str] = {
    MessageType.SYSTEM: "🤖",
    MessageType.USER: "👤",
    MessageType.ASSISTANT: "🤖",
    MessageType.TOOL: "🔧",
    MessageType.ERROR: "❗",
}

VIEWPORT_KEYS: Dict[str, Callable[["_Viewport"], None]] = {
    "pageup": methodcaller("page_up"),
    "pagedown": methodcaller("page_down"),
    "c-pageup": methodcaller("half_page_up"),
    "c-pagedown": methodcaller("half_page_down"),
    "up": methodcaller("line_up"),
    "down": methodcaller("line_down"),
}


def _detect_dark_background() -> bool:
    value = os.environ.get("COLORFGBG")
    if value:
        try:
            background = int(value.split(";")[-1])
        except ValueError:
            return True
        return background < 7 or background == 8
    return True


@dataclass
class ModelContext:
    """State shared by the chat interface and its components."""

    ai: Ai
    has_dark_background: bool = True
    width: int = 0
    height: int = 0
    version: str = VERSION


def _pad(line: str, width: int) -> str:
    return line + " " * max(0, width - cell_len(line))


def _truncate(line: str, width: int) -> str:
    result = ""
    for char in line:
        if cell_len(result + char) > width:
            break
        result += char
    return result


def _chop(word: str, width: int) -> List[str]:
    pieces: List[str] = []
    current = ""
    for char in word:
        if current and cell_len(current + char) > width:
            pieces.append(current)
            current = char
        else:
            current += char
    pieces.append(current)
    return pieces


def _wrap(text: str, width: int) -> List[str]:
    width = max(1, width)
    lines: List[str] = []
    for paragraph in text.split("\n"):
        if cell_len(paragraph) <= width:
            lines.append(paragraph)
            continue
        current = ""
        for word in paragraph.split():
            for piece in _chop(word, width):
                candidate = f"{current} {piece}" if current else piece
                if cell_len(candidate) <= width:
                    current = candidate
                else:
                    lines.append(current)
                    current = piece
        lines.append(current)
    return lines


def _block(lines: List[str], width: int, left: int, right: int) -> str:
    return "\n".join(" " * left + _pad(line, width) + " " * right for line in lines)


def _center(line: str, width: int) -> str:
    left = max(0, (width - cell_len(line)) // 2)
    return _pad(" " * left + line, width)


def _center_block(lines: List[str], width: int, height: int) -> str:
    top = max(0, (height - len(lines)) // 2)
    rows = [_pad("", width)] * top + [_center(line, width) for line in lines]
    rows += [_pad("", width)] * max(0, height - len(rows))
    return "\n".join(rows)


def _markdown(text: str, width: int, dark: bool) -> str:
    buffer = io.StringIO()
    console = Console(
        file=buffer,
        width=width,
        color_system=None,
        force_terminal=False,
        legacy_windows=False,
    )
    console.print(Markdown(Emoji.replace(text), code_theme="monokai" if dark else "default"))
    lines = [line.rstrip() for line in buffer.getvalue().split("\n")]
    return "\n".join(lines).strip("\n")


def _tool_box(text: str, max_width: int) -> List[str]:
    content = f"🔧 {text}"
    inner = cell_len(content) + 2
    lines = ["┌" + "─" * inner + "┐", f"│ {content} │", "└" + "─" * inner + "┘"]
    return [_truncate(line, max_width) for line in lines]


def emoji(message_type: MessageType) -> str:
    """Return the marker shown in front of a message of the given type."""
    return _EMOJIS.get(message_type, ">")


def render(context: ModelContext, message: Message) -> str:
    """Render one message to fit the context's width."""
    max_width = context.width
    inner_width = max(1, max_width - 5)
    text = message.text.strip("\n")
    if message.type is MessageType.USER:
        out = _block(_wrap(text, inner_width), inner_width, 4, 1)
        return out[:1] + "👤" + out[3:]
    if message.type is MessageType.TOOL:
        return _block(_tool_box(message.text, inner_width), inner_width, 4, 1)
    if message.type is MessageType.ASSISTANT:
        try:
            rendered: Optional[str] = _markdown(text, inner_width, context.has_dark_background)
        except Exception:
            rendered = None
        if rendered is not None:
            out = _block(_wrap(rendered, inner_width), inner_width, 4, 1)
            return out[:1] + "🤖" + out[3:]
    width = max(1, max_width - 2)
    return _block(_wrap(f"{emoji(message.type)} {text}", width), width, 1, 1)


def render_footer(context: ModelContext) -> str:
    """Render the status bar with the version right-aligned."""
    version = f" {context.version} "
    spacer = " " * max(0, context.width - cell_len(version))
    return spacer + version


@dataclass
class _Viewport:
    width: int = 0
    height: int = 0
    lines: List[str] = field(default_factory=list)
    offset: int = 0

    def _max_offset(self) -> int:
        return max(0, len(self.lines) - self.height)

    def _scroll_to(self, offset: int) -> None:
        self.offset = min(max(0, offset), self._max_offset())

    def set_content(self, text: str) -> None:
        self.lines = text.split("\n")
        self._scroll_to(self.offset)

    def visible(self) -> List[str]:
        if self.height <= 0:
            return []
        rows = self.lines[self.offset:self.offset + self.height]
        rows += [""] * (self.height - len(rows))
        return [_pad(row, self.width) for row in rows]

    def goto_top(self) -> None:
        self.offset = 0

    def goto_bottom(self) -> None:
        self.offset = self._max_offset()

    def page_up(self) -> None:
        self._scroll_to(self.offset - self.height)

    def page_down(self) -> None:
        self._scroll_to(self.offset + self.height)

    def half_page_up(self) -> None:
        self._scroll_to(self.offset - self.height // 2)

    def half_page_down(self) -> None:
        self._scroll_to(self.offset + self.height // 2)

    def line_up(self) -> None:
        self._scroll_to(self.offset - 1)

    def line_down(self) -> None:
        self._scroll_to(self.offset + 1)


class ChatUi:
    """Full-screen chat interface bound to an agent."""

    def __init__(self, ai: Ai, has_dark_background: Optional[bool] = None) -> None:
        if has_dark_background is None:
            has_dark_background = _detect_dark_background()
        self.context = ModelContext(ai=ai, has_dark_background=has_dark_background)
        self.viewport = _Viewport()
        self.composer = ""

    def _composer_box(self, width: int) -> List[str]:
        inner = max(0, width - 2 * COMPOSER_PADDING_HORIZONTAL - 2)
        wrap_width = max(1, inner - 1)
        if self.composer:
            lines = _wrap(self.composer, wrap_width)[-COMPOSER_HEIGHT:]
        else:
            lines = _wrap(PLACEHOLDER, wrap_width)[:COMPOSER_HEIGHT]
        lines += [""] * (COMPOSER_HEIGHT - len(lines))
        return (
            ["╭" + "─" * inner + "╮"]
            + ["│" + _pad(line, inner) + "│" for line in lines]
            + ["╰" + "─" * inner + "╯"]
        )

    def _refresh(self) -> None:
        session = self.context.ai.session()
        spinner_height = 1 if session.is_running() else 0
        composer_height = COMPOSER_HEIGHT + 2
        self.viewport.width = self.context.width
        self.viewport.height = max(
            0, self.context.height - spinner_height - composer_height - 1
        )
        content = self.render_messages() if session.has_messages() else WELCOME
        self.viewport.set_content(content)

    def render_messages(self) -> str:
        """Render every message of the current session."""
        return "\n".join(
            render(self.context, message) for message in self.context.ai.session().messages()
        )

    def view(self) -> str:
        """Render the whole screen as text."""
        width, height = self.context.width, self.context.height
        if width < MIN_WIDTH or height < MIN_HEIGHT:
            return _center_block(
                ["Terminal size is too small.", f"Minimum size is {MIN_WIDTH}x{MIN_HEIGHT}."],
                width,
                height,
            )
        running = self.context.ai.session().is_running()
        self._refresh()
        lines = self.viewport.visible()
        if running:
            frame = SPINNER_FRAMES[int(time.monotonic() * 10) % len(SPINNER_FRAMES)]
            lines.append(_center(frame, width))
        lines.extend(_center(line, width) for line in self._composer_box(width))
        lines.append(render_footer(self.context))
        return "\n".join(lines)

    def handle_enter(self, text: str) -> bool:
        """Act on submitted composer text; return False when the interface should quit."""
        ai = self.context.ai
        if ai.session().is_running():
            return True
        if text == "":
            return True
        if text == "/clear":
            ai.reset()
            self.composer = ""
            self._refresh()
            self.viewport.goto_top()
            return True
        if text == "/quit":
            return False
        self.composer = ""
        ai.submit(user_message(text))
        self._refresh()
        self.viewport.goto_bottom()
        return True

    def resize(self, width: int, height: int) -> None:
        """Adapt the layout to a new terminal size."""
        self.context.width = width
        self.context.height = height
        self._refresh()

    def on_notification(self) -> None:
        """React to a session change by scrolling to the latest output."""
        self._refresh()
        self.viewport.goto_bottom()

    def _drain(self) -> None:
        while True:
            try:
                self.context.ai.output.get_nowait()
            except queue.Empty:
                return
            self.on_notification()

    def _type(self, data: str) -> None:
        if not self.context.ai.session().is_running():
            self.composer += data

    def _screen(self):
        size = get_app().output.get_size()
        self.resize(size.columns, size.rows)
        self._drain()
        text = self.view()
        if self.context.width < MIN_WIDTH or self.context.height < MIN_HEIGHT:
            return [("", text)]
        body, footer = text.rsplit("\n", 1)
        return [("", body + "\n"), ("class:footer", footer)]

    def run(self) -> None:
        """Run the interactive full-screen interface until the user quits."""
        bindings = KeyBindings()

        @bindings.add("c-c")
        @bindings.add("escape")
        def _quit(event) -> None:
            event.app.exit()

        @bindings.add("enter")
        def _enter(event) -> None:
            if not self.handle_enter(self.composer):
                event.app.exit()

        @bindings.add("c-j")
        def _newline(event) -> None:
            self._type("\n")

        @bindings.add("backspace")
        def _backspace(event) -> None:
            if not self.context.ai.session().is_running():
                self.composer = self.composer[:-1]

        @bindings.add("<any>")
        def _insert(event) -> None:
            if event.data and event.data.isprintable():
                self._type(event.data)

        for key, action in VIEWPORT_KEYS.items():
            bindings.add(key)(lambda event, action=action: action(self.viewport))

        application = Application(
            layout=Layout(Window(FormattedTextControl(self._screen))),
            key_bindings=bindings,
            style=Style.from_dict({"footer": f"bg:{FOOTER_BACKGROUND} #000000"}),
            full_screen=True,
            refresh_interval=0.1,
        )
        application.run()