"""Registry and discovery of tool providers."""

from __future__ import annotations

import json
from abc import abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List

from .api import Feature, FeatureAttributes, Tool
from .config import Config

_providers: Dict[str, "ToolsProvider"] = {}


@dataclass(frozen=True)
class ToolsAttributes(FeatureAttributes):
    """Attributes of a tools provider."""

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name}


class ToolsProvider(Feature):
    """A source of tools the model may call."""

    @abstractmethod
    def attributes(self) -> ToolsAttributes:
        """Return the provider's attributes."""

    @abstractmethod
    def is_available(self, config: Config) -> bool:
        """Report whether the provider can be used."""

    @abstractmethod
    def get_tools(self, config: Config) -> List[Tool]:
        """Return the tools the provider offers."""

    def to_json(self) -> str:
        return json.dumps(self.attributes().to_dict())


def register(provider: ToolsProvider) -> None:
    """Register a tools provider under its name."""
    name = provider.attributes().name
    if name in _providers:
        raise ValueError(f"tool provider already registered: {name}")
    _providers[name] = provider


def clear() -> None:
    """Remove every registered tools provider."""
    _providers.clear()


def registered() -> Dict[str, ToolsProvider]:
    """Return a copy of the registered providers keyed by name."""
    return dict(_providers)


def discover(config: Config) -> List[ToolsProvider]:
    """Return the available providers, sorted by name."""
    available = [p for p in _providers.values() if p.is_available(config)]
    return sorted(available, key=lambda p: p.attributes().name)