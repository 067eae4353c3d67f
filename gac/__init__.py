"""gac - command-line client for GPT4All and other OpenAI-compatible chat servers."""

__version__ = "0.3.0"
