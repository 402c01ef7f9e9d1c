import pytest

from aicli.api import (
    Feature,
    FeatureAttributes,
    Message,
    MessageType,
    Tool,
    ToolParameter,
    ToolParameterType,
    assistant_message,
    error_message,
    system_message,
    tool_message,
    user_message,
)


@pytest.mark.parametrize(
    "factory, expected_type, expected_role",
    [
        (system_message, MessageType.SYSTEM, "system"),
        (user_message, MessageType.USER, "user"),
        (assistant_message, MessageType.ASSISTANT, "assistant"),
        (error_message, MessageType.ERROR, "error"),
        (tool_message, MessageType.TOOL, "tool"),
    ],
)
def test_message_factories(factory, expected_type, expected_role):
    message = factory("some text")
    assert message.type is expected_type
    assert message.text == "some text"
    assert message.role() == expected_role


def test_messages_compare_by_value():
    assert user_message("hi") == Message(MessageType.USER, "hi")
    assert user_message("hi") != assistant_message("hi")


def test_message_is_immutable():
    message = user_message("hi")
    with pytest.raises(AttributeError):
        message.text = "other"
    assert message.text == "hi"
    assert message.role() == "user"


def test_tool_function_is_callable_with_args():
    tool = Tool(
        name="echo",
        description="Echo the value",
        function=lambda args: args.get("value", ""),
        parameters={"value": ToolParameter(ToolParameterType.STRING, "The value", True)},
    )
    assert tool.function({"value": "abc"}) == "abc"
    assert tool.parameters["value"].required is True
    assert tool.parameters["value"].type.value == "string"


def test_tool_parameter_defaults():
    parameter = ToolParameter(ToolParameterType.STRING)
    assert parameter.required is False
    assert parameter.description == ""


def test_feature_attributes_to_dict():
    assert FeatureAttributes("fs").to_dict() == {"name": "fs"}


def test_feature_is_abstract():
    with pytest.raises(TypeError):
        Feature()


def test_feature_subclass_missing_method_cannot_be_created():
    attributes = FeatureAttributes("incomplete")

    class Incomplete(Feature):
        def attributes(self):
            return attributes

    assert attributes.to_dict() == {"name": "incomplete"}
    with pytest.raises(TypeError, match="is_available"):
        Incomplete()


def test_feature_subclass_attributes_serialise():
    attributes = FeatureAttributes("always")

    class Always(Feature):
        def attributes(self):
            return attributes

        def is_available(self, config):
            return True

    feature = Always()
    assert feature.attributes() is attributes
    assert feature.attributes().to_dict() == {"name": "always"}
    assert attributes.name == "always"