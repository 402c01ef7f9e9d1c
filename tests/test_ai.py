import json
import time

import pytest

from aicli.ai import (
    Ai,
    ChatMessage,
    ChatModel,
    InvokableTool,
    MaxStepsExceeded,
    Notification,
    ToolCall,
    ToolInfo,
    to_invokable_tool,
)
from aicli.api import (
    MessageType,
    Tool,
    ToolParameter,
    ToolParameterType,
    assistant_message,
    system_message,
    tool_message,
    user_message,
)


class FakeChatModel(ChatModel):
    def __init__(self, stream_reader=None):
        self.stream_reader = stream_reader
        self.calls = []
        self.tools = None

    def stream(self, messages):
        self.calls.append(list(messages))
        if self.stream_reader is not None:
            return self.stream_reader(messages)
        return iter([ChatMessage("assistant", "AI is not running, this is a test")])

    def with_tools(self, tools):
        self.tools = list(tools)
        return self


def _echo_tool():
    return Tool(
        name="echo",
        description="Echo",
        function=lambda args: json.dumps(args),
        parameters={"value": ToolParameter(ToolParameterType.STRING, "Value", True)},
    )


def test_prompt_appends_user_and_assistant():
    ai = Ai(FakeChatModel(), [])
    ai.prompt(user_message("Hello AItana"))
    session = ai.session()
    assert session.messages() == [
        user_message("Hello AItana"),
        assistant_message("AI is not running, this is a test"),
    ]
    assert session.is_running() is False


def test_prompt_error_is_recorded():
    def failing(_messages):
        raise RuntimeError("error generating response")

    ai = Ai(FakeChatModel(failing), [])
    ai.prompt(user_message("Hello Alex"))
    messages = ai.session().messages()
    assert messages[0] == user_message("Hello Alex")
    assert messages[-1].type is MessageType.ERROR
    assert messages[-1].text.startswith("[NodeRunError]")
    assert "error generating response" in messages[-1].text
    assert ai.session().is_running() is False


def test_tool_call_then_answer():
    state = {"requested": False}

    def reader(_messages):
        if state["requested"]:
            return iter([ChatMessage("assistant", "Here is the list of files")])
        state["requested"] = True
        call = ToolCall(id="1337", name="echo", arguments='{"value": "x"}')
        return iter([ChatMessage("assistant", "The list of files", tool_calls=(call,))])

    model = FakeChatModel(reader)
    ai = Ai(model, [_echo_tool()])
    ai.prompt(user_message("Hello Alex"))
    assert ai.session().messages() == [
        user_message("Hello Alex"),
        tool_message("echo"),
        assistant_message("Here is the list of files"),
    ]
    second_call = model.calls[1]
    assert second_call[-1].role == "tool"
    assert second_call[-1].tool_call_id == "1337"
    assert json.loads(second_call[-1].content) == {"value": "x"}


def test_tools_are_bound_to_model():
    model = FakeChatModel()
    ai = Ai(model, [_echo_tool()])
    ai.prompt(user_message("hi"))
    assert [info.name for info in model.tools] == ["echo"]


def test_unknown_tool_is_an_error():
    def reader(_messages):
        return iter([ChatMessage("assistant", "", tool_calls=(ToolCall("1", "missing"),))])

    ai = Ai(FakeChatModel(reader), [])
    ai.prompt(user_message("hi"))
    last = ai.session().messages()[-1]
    assert last.type is MessageType.ERROR
    assert "missing" in last.text


def test_endless_tool_calls_exceed_max_steps():
    def reader(_messages):
        return iter([ChatMessage("assistant", "", tool_calls=(ToolCall("1", "echo", "{}"),))])

    ai = Ai(FakeChatModel(reader), [_echo_tool()])
    ai.prompt(user_message("loop"))
    messages = ai.session().messages()
    assert messages[-1].type is MessageType.ERROR
    assert "exceeds max steps" in messages[-1].text
    assert all(m == tool_message("echo") for m in messages[1:-1])
    assert isinstance(ai.session().error, MaxStepsExceeded)


def test_streamed_chunks_are_joined():
    def reader(_messages):
        return iter([ChatMessage("assistant", "Hel"), ChatMessage("assistant", "lo")])

    ai = Ai(FakeChatModel(reader), [])
    ai.prompt(user_message("hi"))
    assert ai.session().messages()[-1] == assistant_message("Hello")
    assert ai.session().in_progress == assistant_message("")


def test_schema_messages_include_system_and_history():
    model = FakeChatModel()
    ai = Ai(model, [], system_prompt="be brief")
    ai.prompt(user_message("first"))
    ai.prompt(user_message("second"))
    roles = [m.role for m in model.calls[1]]
    assert roles == ["system", "user", "assistant", "user"]
    assert model.calls[1][0].content == "be brief"
    assert model.calls[1][-1].content == "second"


def test_reset_keeps_system_prompt():
    ai = Ai(FakeChatModel(), [], system_prompt="be brief")
    ai.prompt(user_message("hi"))
    ai.reset()
    session = ai.session()
    assert session.messages() == []
    assert session.system_prompt() == system_message("be brief")


def test_changes_are_notified():
    ai = Ai(FakeChatModel(), [])
    ai.prompt(user_message("hi"))
    assert ai.output.qsize() > 0
    assert ai.output.get_nowait() == Notification()


def test_run_processes_submitted_messages():
    ai = Ai(FakeChatModel(), [])
    ai.run()
    try:
        ai.submit(user_message("Hello"))
        deadline = time.monotonic() + 5
        while time.monotonic() < deadline:
            session = ai.session()
            if len(session.messages()) == 2 and not session.is_running():
                break
            time.sleep(0.01)
        assert ai.session().messages()[-1] == assistant_message(
            "AI is not running, this is a test"
        )
    finally:
        ai.stop()


def test_to_invokable_tool_describes_parameters():
    invokable = to_invokable_tool(_echo_tool())
    info = invokable.info()
    assert info == ToolInfo(
        name="echo",
        description="Echo",
        parameters={"value": {"type": "string", "description": "Value", "required": True}},
    )


def test_invoke_with_empty_arguments_passes_empty_dict():
    tool = InvokableTool(ToolInfo("t", "d"), lambda args: json.dumps(args))
    assert tool.invoke("") == "{}"


def test_invoke_passes_parsed_arguments():
    tool = InvokableTool(ToolInfo("t", "d"), lambda args: args["a"])
    assert tool.invoke('{"a": "b"}') == "b"


def test_invoke_with_invalid_json_raises():
    tool = InvokableTool(ToolInfo("t", "d"), lambda args: "")
    with pytest.raises(ValueError):
        tool.invoke("{not json")