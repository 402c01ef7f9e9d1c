"""Inference provider backed by a local Ollama server."""

from __future__ import annotations

import json
from typing import Any, Dict, Iterator, List, Optional, Sequence

import httpx

from . import inference
from .ai import ChatMessage, ChatModel, ToolCall, ToolInfo
from .config import Config
from .inference import InferenceAttributes, InferenceProvider

BASE_URL = "http://localhost:11434"
DEFAULT_MODEL = "llama3.2:3b"


def _tool_schema(info: ToolInfo) -> Dict[str, Any]:
    properties = {
        name: {"type": spec["type"], "description": spec["description"]}
        for name, spec in info.parameters.items()
    }
    required = [name for name, spec in info.parameters.items() if spec.get("required")]
    return {
        "type": "function",
        "function": {
            "name": info.name,
            "description": info.description,
            "parameters": {"type": "object", "properties": properties, "required": required},
        },
    }


def _to_wire(message: ChatMessage) -> Dict[str, Any]:
    wire: Dict[str, Any] = {"role": message.role, "content": message.content}
    if message.tool_calls:
        wire["tool_calls"] = [
            {"function": {"name": c.name, "arguments": json.loads(c.arguments or "{}")}}
            for c in message.tool_calls
        ]
    if message.role == "tool" and message.name:
        wire["tool_name"] = message.name
    return wire


class OllamaChatModel(ChatModel):
    """Chat model served by Ollama's chat endpoint."""

    def __init__(
        self, model: str, base_url: str = BASE_URL, tools: Sequence[ToolInfo] = ()
    ) -> None:
        self.model = model
        self.base_url = base_url
        self.tools = tuple(tools)

    def with_tools(self, tools: List[ToolInfo]) -> "OllamaChatModel":
        return OllamaChatModel(self.model, self.base_url, tools)

    def stream(self, messages: List[ChatMessage]) -> Iterator[ChatMessage]:
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": [_to_wire(m) for m in messages],
            "stream": True,
        }
        if self.tools:
            payload["tools"] = [_tool_schema(t) for t in self.tools]
        call_index = 0
        with httpx.Client(base_url=self.base_url, timeout=None) as client:
            with client.stream("POST", "/api/chat", json=payload) as response:
                if response.status_code != 200:
                    response.read()
                    raise RuntimeError(
                        f"ollama chat failed with status {response.status_code}: {response.text}"
                    )
                for line in response.iter_lines():
                    if not line.strip():
                        continue
                    data = json.loads(line)
                    if "error" in data:
                        raise RuntimeError(str(data["error"]))
                    message = data.get("message") or {}
                    calls = []
                    for raw in message.get("tool_calls") or []:
                        function = raw.get("function") or {}
                        call_id = raw.get("id") or f"call_{call_index}"
                        call_index += 1
                        calls.append(
                            ToolCall(
                                id=call_id,
                                name=function.get("name", ""),
                                arguments=json.dumps(function.get("arguments") or {}),
                            )
                        )
                    yield ChatMessage(
                        role=message.get("role", "assistant"),
                        content=message.get("content", ""),
                        tool_calls=tuple(calls),
                    )


class OllamaProvider(InferenceProvider):
    """Local Ollama inference provider."""

    def attributes(self) -> InferenceAttributes:
        return InferenceAttributes(name="ollama", distant=False)

    def get_models(self, config: Optional[Config]) -> List[str]:
        response = httpx.get(BASE_URL + "/v1/models")
        data = json.loads(response.content)
        return [entry["id"] for entry in data.get("data") or []]

    def is_available(self, config: Optional[Config]) -> bool:
        try:
            response = httpx.get(BASE_URL + "/v1/models")
        except httpx.HTTPError:
            return False
        return response.status_code == 200

    def get_inference(self, config: Config) -> OllamaChatModel:
        model = config.model if config.model is not None else DEFAULT_MODEL
        return OllamaChatModel(model=model, base_url=BASE_URL)

    def to_json(self) -> str:
        return json.dumps(self.attributes().to_dict())


inference.register(OllamaProvider())