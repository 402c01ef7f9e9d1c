"""Core data types shared across the application: messages, tools and features."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict


class MessageType(str, Enum):
    """The kind of participant or event a message stands for."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"
    ERROR = "error"


@dataclass(frozen=True)
class Message:
    """A single message in a conversation."""

    type: MessageType
    text: str = ""

    def role(self) -> str:
        """Return the role name of the message."""
        return self.type.value


def system_message(text: str) -> Message:
    return Message(MessageType.SYSTEM, text)


def user_message(text: str) -> Message:
    return Message(MessageType.USER, text)


def assistant_message(text: str) -> Message:
    return Message(MessageType.ASSISTANT, text)


def error_message(text: str) -> Message:
    return Message(MessageType.ERROR, text)


def tool_message(text: str) -> Message:
    return Message(MessageType.TOOL, text)


class ToolParameterType(str, Enum):
    """Data types a tool parameter may declare."""

    STRING = "string"


@dataclass(frozen=True)
class ToolParameter:
    """Description of one argument a tool accepts."""

    type: ToolParameterType
    description: str = ""
    required: bool = False


@dataclass
class Tool:
    """A function the model may call, with its schema."""

    name: str
    description: str
    function: Callable[[Dict[str, Any]], str]
    parameters: Dict[str, ToolParameter] = field(default_factory=dict)


@dataclass(frozen=True)
class FeatureAttributes:
    """Attributes common to every feature."""

    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name}


class Feature(ABC):
    """Something the application can discover and use if available."""

    @abstractmethod
    def attributes(self) -> FeatureAttributes:
        """Return the feature's attributes."""

    @abstractmethod
    def is_available(self, config: Any) -> bool:
        """Report whether the feature can be used with the given configuration."""