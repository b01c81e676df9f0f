"""geminit — bootstrap local workspaces for the Gemini CLI."""

__version__ = "0.1.0"
