"""Agent that drives a tool-calling chat model and keeps the session state."""

from __future__ import annotations

import json
import queue
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from .api import (
    Message,
    MessageType,
    Tool,
    ToolParameterType,
    assistant_message,
    system_message,
    tool_message,
)
from .config import Config
from .session import Session

MAX_STEP = 10


@dataclass(frozen=True)
class ToolCall:
    """A request from the model to run a tool."""

    id: str
    name: str
    arguments: str = ""


@dataclass(frozen=True)
class ChatMessage:
    """A message exchanged with a chat model."""

    role: str
    content: str = ""
    tool_calls: Tuple[ToolCall, ...] = ()
    tool_call_id: str = ""
    name: str = ""


@dataclass(frozen=True)
class ToolInfo:
    """Description of a tool as presented to a model."""

    name: str
    description: str
    parameters: Dict[str, Dict[str, Any]] = field(default_factory=dict)


class ChatModel(ABC):
    """A chat model able to stream replies and call tools."""

    @abstractmethod
    def stream(self, messages: List[ChatMessage]) -> Iterable[ChatMessage]:
        """Stream the reply to the conversation as message chunks."""

    @abstractmethod
    def with_tools(self, tools: List[ToolInfo]) -> "ChatModel":
        """Return a model bound to the given tools."""


@dataclass(frozen=True)
class Notification:
    """Signals that the session state changed."""


class MaxStepsExceeded(RuntimeError):
    """The agent took more steps than allowed."""

    def __init__(self, max_steps: int = MAX_STEP) -> None:
        super().__init__(f"exceeds max steps: {max_steps}")
        self.max_steps = max_steps


class _NodeRunError(RuntimeError):
    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"[NodeRunError] {cause}")
        self.cause = cause


def _to_type(parameter_type: ToolParameterType) -> str:
    if parameter_type is ToolParameterType.STRING:
        return "string"
    return "object"


@dataclass(frozen=True)
class InvokableTool:
    """A tool bound to its model-facing description."""

    tool_info: ToolInfo
    function: Callable[[Dict[str, Any]], str]

    def info(self) -> ToolInfo:
        return self.tool_info

    def invoke(self, arguments_json: str) -> str:
        """Run the tool with arguments given as a JSON object."""
        args: Dict[str, Any] = {}
        if arguments_json:
            parsed = json.loads(arguments_json)
            if parsed is not None:
                args = parsed
        return self.function(args)


def to_invokable_tool(tool: Tool) -> InvokableTool:
    params = {
        key: {
            "type": _to_type(parameter.type),
            "description": parameter.description,
            "required": parameter.required,
        }
        for key, parameter in tool.parameters.items()
    }
    info = ToolInfo(name=tool.name, description=tool.description, parameters=params)
    return InvokableTool(tool_info=info, function=tool.function)


_STOP = object()


class Ai:
    """Runs prompts against a model and publishes session changes."""

    def __init__(
        self,
        llm: ChatModel,
        tools: Optional[List[Tool]] = None,
        config: Optional[Config] = None,
        system_prompt: str = "",
    ) -> None:
        self.config = config
        self._llm = llm
        self._tools = list(tools or [])
        self.input: "queue.Queue[Any]" = queue.Queue()
        self.output: "queue.Queue[Notification]" = queue.Queue()
        self._session = Session(prompt=system_message(system_prompt))
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._worker: Optional[threading.Thread] = None

    def session(self) -> Session:
        """Return a snapshot of the current session."""
        with self._lock:
            return self._session

    def _notify(self) -> None:
        self.output.put(Notification())

    def _update(self, **changes: Any) -> None:
        with self._lock:
            self._session = replace(self._session, **changes)
        self._notify()

    def _append_message(self, message: Message) -> None:
        with self._lock:
            self._session = replace(self._session, history=self._session.history + (message,))
        self._notify()

    def reset(self) -> None:
        """Start a fresh session, keeping the system prompt."""
        with self._lock:
            self._session = Session(prompt=self._session.system_prompt())
        self._notify()

    def submit(self, message: Message) -> None:
        """Queue a user message for the running agent."""
        self.input.put(message)

    def run(self) -> None:
        """Start processing queued messages in a background thread."""
        if self._worker is not None and self._worker.is_alive():
            return
        self._stop.clear()
        self._worker = threading.Thread(target=self._loop, daemon=True)
        self._worker.start()

    def stop(self) -> None:
        """Stop the background thread."""
        self._stop.set()
        self.input.put(_STOP)
        if self._worker is not None:
            self._worker.join()
            self._worker = None

    def _loop(self) -> None:
        while not self._stop.is_set():
            item = self.input.get()
            if item is _STOP or self._stop.is_set():
                return
            self.prompt(item)

    def prompt(self, message: Message) -> None:
        """Send a message to the model and record the reply."""
        self._update(running=True)
        try:
            self._append_message(message)
            try:
                tools = {t.name: to_invokable_tool(t) for t in self._tools}
                llm = self._llm.with_tools([t.info() for t in tools.values()])
            except Exception as exc:
                self._update(error=exc)
                return
            chunks: List[str] = []
            try:
                for chunk in self._agent_stream(llm, tools, self._schema_messages()):
                    chunks.append(chunk)
                    self._update(in_progress=assistant_message("".join(chunks)))
            except MaxStepsExceeded as exc:
                self._update(error=exc)
                return
            except Exception as exc:
                self._update(error=_NodeRunError(exc))
                return
            self._update(running=False)
            text = "".join(chunks)
            if text:
                self._append_message(assistant_message(text))
            self._update(in_progress=assistant_message(""))
        finally:
            self._update(running=False)

    def _schema_messages(self) -> List[ChatMessage]:
        session = self.session()
        result: List[ChatMessage] = []
        if session.system_prompt().text:
            result.append(ChatMessage("system", session.system_prompt().text))
        for message in session.messages():
            if message.type is MessageType.USER:
                result.append(ChatMessage("user", message.text))
            elif message.type is MessageType.ASSISTANT:
                result.append(ChatMessage("assistant", message.text))
        return result

    def _agent_stream(
        self,
        llm: ChatModel,
        tools: Dict[str, InvokableTool],
        conversation: List[ChatMessage],
    ) -> Iterator[str]:
        conversation = list(conversation)
        steps = 0
        while True:
            steps += 1
            if steps > MAX_STEP:
                raise MaxStepsExceeded()
            chunks = iter(llm.stream(conversation))
            pending: List[ChatMessage] = []
            calls_tools = False
            for chunk in chunks:
                pending.append(chunk)
                if chunk.tool_calls:
                    calls_tools = True
                    break
                if chunk.content:
                    break
            if not calls_tools:
                for chunk in pending:
                    if chunk.content:
                        yield chunk.content
                for chunk in chunks:
                    if chunk.content:
                        yield chunk.content
                return
            pending.extend(chunks)
            reply = ChatMessage(
                "assistant",
                "".join(c.content for c in pending),
                tool_calls=tuple(call for c in pending for call in c.tool_calls),
            )
            conversation.append(reply)
            steps += 1
            if steps > MAX_STEP:
                raise MaxStepsExceeded()
            for call in reply.tool_calls:
                tool = tools.get(call.name)
                if tool is None:
                    raise LookupError(f"tool {call.name} not found in toolsNode indexes")
                result = tool.invoke(call.arguments)
                conversation.append(
                    ChatMessage("tool", result, tool_call_id=call.id, name=call.name)
                )
                self._append_message(tool_message(call.name))