# aicli

A Python library for chatting with tool-calling AI models in a full-screen
terminal interface, with registries for discovering which inference and tool
providers are available on the current system.

## Installation

```
pip install .
```

To run the tests as well:

```
pip install ".[test]"
pytest
```

## Modules

- `aicli.api`: shared data types: `Message` and `MessageType`, the helpers
  `system_message`, `user_message`, `assistant_message`, `error_message` and
  `tool_message`, and `Tool` / `ToolParameter` for describing functions a
  model may call.
- `aicli.config`: `Config` and `load_config()`, which reads the
  `GEMINI_API_KEY` environment variable. Also holds `VERSION` (`0.0.0`).
- `aicli.inference`: `register`, `clear`, `registered` and `discover` for
  inference providers. `discover(config)` returns the available providers
  sorted by name. Registering a second provider with the same name raises
  `ValueError`.
- `aicli.tools`: the same registry functions for tool providers.
- `aicli.ollama`: `OllamaProvider` and `OllamaChatModel`, which talk to an
  Ollama server at `http://localhost:11434`. The default model is
  `llama3.2:3b`; `Config.model` overrides it. Importing the module registers
  the provider under the name `ollama`.
- `aicli.fs`: `FsProvider` and the `file_list` tool, which lists a directory
  (the current working directory by default) as JSON with each entry's name,
  type, size and modification time. Importing the module registers the
  provider under the name `fs`.
- `aicli.session`: `Session`, an immutable snapshot of the conversation, the
  reply being streamed, the last error and whether a prompt is running.
- `aicli.ai`: `Ai`, which runs queued prompts against a `ChatModel` in a
  background thread, executes the tools the model asks for (at most 10 agent
  steps) and publishes a `Notification` on `Ai.output` for every change.
- `aicli.ui`: `ChatUi`, the full-screen terminal interface, with the
  rendering helpers `render`, `render_footer` and `emoji`.

## Example

```python
from aicli import fs, inference, ollama, tools
from aicli.ai import Ai
from aicli.config import load_config
from aicli.ui import ChatUi

config = load_config()
providers = inference.discover(config)
if not providers:
    raise SystemExit("no suitable inference found")
llm = providers[0].get_inference(config)
all_tools = [t for p in tools.discover(config) for t in p.get_tools(config)]

agent = Ai(llm, all_tools, config)
agent.run()
try:
    ChatUi(agent).run()
finally:
    agent.stop()
```

Inside the chat interface:

- type a message and press Enter to send it; Ctrl+J inserts a new line;
- `/clear` resets the conversation, keeping the system prompt;
- `/quit`, Esc or Ctrl+C leaves the interface;
- PgUp / PgDown scroll a page, Ctrl+PgUp / Ctrl+PgDown half a page,
  Up / Down one line.

A terminal smaller than 30x10 shows a size warning instead of the chat.

## What this package does not do

- It installs no command: there is no `version`, `discover` or `chat` command
  line program. The interface is started from Python as shown above.
- It has no helper that picks the preferred inference provider and gathers the
  available tools in one call; the example does that by hand, taking the first
  provider in name order.
- Ollama is the only inference provider included; other providers have to be
  written as `InferenceProvider` subclasses and registered with
  `aicli.inference.register`.