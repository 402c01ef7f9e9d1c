"""Registry and discovery of inference providers."""

from __future__ import annotations

import json
from abc import abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .api import Feature, FeatureAttributes
from .config import Config

_providers: Dict[str, "InferenceProvider"] = {}


@dataclass(frozen=True)
class InferenceAttributes(FeatureAttributes):
    """Attributes of an inference provider."""

    distant: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "distant": self.distant}


class InferenceProvider(Feature):
    """A source of chat models that can be discovered when available."""

    @abstractmethod
    def attributes(self) -> InferenceAttributes:
        """Return the provider's attributes."""

    @abstractmethod
    def is_available(self, config: Config) -> bool:
        """Report whether the provider can be used."""

    @abstractmethod
    def get_models(self, config: Config) -> List[str]:
        """List the model names the provider offers."""

    @abstractmethod
    def get_inference(self, config: Config) -> Any:
        """Return a tool-calling chat model for the configured model."""

    def to_json(self) -> str:
        return json.dumps(self.attributes().to_dict())


def register(provider: Optional[InferenceProvider]) -> None:
    """Register an inference provider under its name."""
    if provider is None:
        raise ValueError("cannot register a nil inference provider")
    name = provider.attributes().name
    if name in _providers:
        raise ValueError(f"inference provider already registered: {name}")
    _providers[name] = provider


def clear() -> None:
    """Remove every registered inference provider."""
    _providers.clear()


def registered() -> Dict[str, InferenceProvider]:
    """Return a copy of the registered providers keyed by name."""
    return dict(_providers)


def discover(config: Config) -> List[InferenceProvider]:
    """Return the available providers, sorted by name."""
    available = [p for p in _providers.values() if p.is_available(config)]
    return sorted(available, key=lambda p: p.attributes().name)