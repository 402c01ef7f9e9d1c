import json

import pytest

from aicli import tools
from aicli.api import Tool
from aicli.config import load_config
from aicli.tools import ToolsAttributes, ToolsProvider


class FakeProvider(ToolsProvider):
    def __init__(self, name, available=True, provided=None):
        self.name = name
        self.available = available
        self.provided = provided or []

    def attributes(self):
        return ToolsAttributes(self.name)

    def is_available(self, config):
        return self.available

    def get_tools(self, config):
        return self.provided


@pytest.fixture(autouse=True)
def clean_registry():
    tools.clear()
    yield
    tools.clear()


def test_register_adds_provider():
    tools.register(FakeProvider("testProvider"))
    assert "testProvider" in tools.registered()


def test_register_same_name_raises():
    provider = FakeProvider("duplicateProvider")
    tools.register(provider)
    with pytest.raises(ValueError, match="duplicateProvider"):
        tools.register(provider)


def test_clear_removes_providers():
    tools.register(FakeProvider("testProvider"))
    tools.clear()
    assert tools.registered() == {}


def test_discover_with_no_providers_is_empty():
    assert tools.discover(load_config()) == []


def test_discover_returns_only_available():
    tools.register(FakeProvider("availableProvider", available=True))
    tools.register(FakeProvider("unavailableProvider", available=False))
    found = tools.discover(load_config())
    assert len(found) == 1
    assert found[0].attributes().name == "availableProvider"


def test_discover_marshalling():
    tools.register(FakeProvider("provider-two"))
    tools.register(FakeProvider("provider-one"))
    found = tools.discover(load_config())
    data = [json.loads(p.to_json()) for p in found]
    assert data == json.loads('[{"name":"provider-one"},{"name":"provider-two"}]')


def test_get_tools_returns_provided_tools():
    tool = Tool(name="noop", description="Does nothing", function=lambda args: "")
    provider = FakeProvider("withTools", provided=[tool])
    tools.register(provider)
    found = tools.discover(load_config())
    assert [t.name for t in found[0].get_tools(load_config())] == ["noop"]