"""Terminal chat with tool-calling AI models, with inference and tool provider discovery."""

__version__ = "0.0.0"