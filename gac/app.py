"""
Main application module for gac.
"""

import argparse
import copy
import json
import sys

from . import config
from .api_client import GPT4AllError, chat_completion, list_models
from .api.errors import APIErrors
from .markdown_renderer import create_renderer
from .persistent_config import PersistentConfig
from .prompts import MODES, build_messages
from .utils import emsg, imsg, wmsg, write_stdout

DEFAULT_MODEL_CHOICE = "Use default gpt4all setting"

USAGE_EXAMPLES = """Usage:
  gac -a "Hello gpt4all"
  gac suggest "How do I connect to ssh server on port 5322"
  gac explain "How do I use rsync?"
  gac ask "What is the best way to learn Python?"
  gac chat
  gac models
  gac config
  gac config get <key>
  gac config set <key> <value>
  gac --no-render -a "Raw markdown output"
  gac --debug-render -a "Show rendered and raw output"
"""


def _build_flag_parser() -> argparse.ArgumentParser:
    """Flags accepted anywhere on the command line."""
    parser = argparse.ArgumentParser(add_help=False, allow_abbrev=False)
    parser.add_argument(
        "--no-render",
        dest="render_markdown",
        action="store_false",
        default=None,
        help="Disable markdown rendering",
    )
    parser.add_argument(
        "--debug-render",
        action="store_true",
        default=None,
        help="Show both rendered and raw output",
    )
    parser.add_argument(
        "-d",
        "--detailed-suggest",
        action="store_true",
        default=None,
        help="Provide more detailed suggestions (only in suggest mode)",
    )
    return parser


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=config.APP_NAME,
        description="gac - GPT4All CLI",
        epilog=USAGE_EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        parents=[_build_flag_parser()],
    )
    parser.add_argument(
        "-a",
        dest="ask_prompt",
        nargs=argparse.REMAINDER,
        help="Single prompt mode (alias for ask)",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    help_texts = {
        "suggest": "Suggestion mode",
        "explain": "Explanation mode",
        "ask": "Ask mode",
    }
    for mode in MODES:
        mode_parser = subparsers.add_parser(mode, help=help_texts[mode])
        mode_parser.add_argument("prompt", nargs=argparse.REMAINDER)

    subparsers.add_parser("chat", help="Interactive chat mode")
    subparsers.add_parser("models", help="List models and set default")

    config_parser = subparsers.add_parser("config", help="View or edit configuration")
    config_parser.add_argument("action", nargs="?", choices=["get", "set"])
    config_parser.add_argument("key", nargs="?")
    config_parser.add_argument("value", nargs="*")
    return parser


def effective_settings(settings, flags) -> dict:
    """Persisted settings with this run's flags and environment overrides applied."""
    run_settings = copy.deepcopy(dict(settings))
    if config.BASE_URL_OVERRIDE:
        run_settings["base_url"] = config.BASE_URL_OVERRIDE
    if config.MODEL_OVERRIDE:
        run_settings["model"] = config.MODEL_OVERRIDE
    for key in ("render_markdown", "debug_render", "detailed_suggest"):
        value = getattr(flags, key)
        if value is not None:
            run_settings[key] = value
    return run_settings


def print_reply(settings, reply: str, sink=write_stdout, end: str = ""):
    """Show a reply that was not streamed, plus the raw text in debug mode."""
    if not settings.get("stream"):
        if settings.get("render_markdown"):
            reply_text = create_renderer(settings.get("markdown_styles")).render_text(reply)
        else:
            reply_text = reply
        sink(reply_text + end)
    if settings.get("debug_render"):
        sink(f"\n--- RAW ---\n{reply}\n")


def run_single_prompt(mode: str, prompt: str, settings, sink=write_stdout) -> int:
    messages = build_messages(mode, prompt, bool(settings.get("detailed_suggest")))
    reply = chat_completion(settings, messages, sink)
    print_reply(settings, reply, sink, end="\n")
    sink("\n")
    return 0


def run_chat(settings, input_func=input, sink=write_stdout) -> int:
    """Interactive chat; the whole conversation is sent on every turn."""
    print('Interactive chat. Type "exit" to quit.\n')
    messages = []

    while True:
        try:
            prompt = input_func("You> ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nBye.")
            return 0

        if not prompt:
            continue
        if prompt.lower() in ("exit", "quit"):
            print("Bye.")
            return 0

        messages.append({"role": "user", "content": prompt})
        sink("A.I> ")
        try:
            reply = chat_completion(settings, messages, sink)
        except KeyboardInterrupt:
            sink("\n")
            wmsg("Reply interrupted.")
            messages.pop()
            continue
        except GPT4AllError as e:
            sink("\n")
            emsg(f"Error: {e}")
            messages.pop()
            continue

        print_reply(settings, reply, sink)
        sink("\n\n")
        messages.append({"role": "assistant", "content": reply})


def run_models(settings, run_settings, input_func=input) -> int:
    """List the server's models and store the chosen default."""
    models = list_models(run_settings["base_url"])
    if not models:
        APIErrors.print(APIErrors.NO_MODELS)
        return 0

    choices = [DEFAULT_MODEL_CHOICE] + models
    current = settings.get("model")
    print("Available models:")
    for index, model in enumerate(choices):
        marker = "*" if model == current else " "
        print(f" {marker} {index}) {model}")

    try:
        answer = input_func(f"\nSelect a default model [0-{len(choices) - 1}] (Enter to cancel): ")
    except (EOFError, KeyboardInterrupt):
        answer = ""
    answer = answer.strip()
    if not answer:
        print("Selection canceled.")
        return 0

    if not answer.isdigit() or int(answer) >= len(choices):
        emsg(f"Invalid selection: {answer}")
        return 1

    selected = choices[int(answer)]
    if selected == DEFAULT_MODEL_CHOICE:
        selected = config.DEFAULT_MODEL
    settings["model"] = selected
    settings.save()
    imsg(f'Default model set to "{selected}".')
    return 0


def _format_value(value) -> str:
    if isinstance(value, (dict, list)):
        return json.dumps(value, indent=2, ensure_ascii=False)
    return str(value)


def run_config(settings, args) -> int:
    if args.action == "get" and args.key:
        print(_format_value(settings.get_value(args.key)))
        return 0

    if args.action == "set" and args.key and args.value:
        settings.set_value(args.key, " ".join(args.value))
        imsg(f"Updated {args.key} in {settings.config_file}")
        print(_format_value(dict(settings)))
        return 0

    print(f"Config file: {settings.config_file}")
    print(_format_value(dict(settings)))
    return 0


def _missing_prompt(label: str) -> int:
    emsg(f"Error: missing prompt after {label}.")
    return 1


def run(argv) -> int:
    """Dispatch one command line. Returns the process exit status."""
    flags, rest = _build_flag_parser().parse_known_args(argv)
    parser = build_parser()

    if not rest:
        parser.print_help()
        return 0

    known_commands = set(MODES) | {"chat", "models", "config"}
    if not rest[0].startswith("-") and rest[0] not in known_commands:
        print("Unknown command.\n")
        parser.print_help()
        return 1

    command = rest[0]
    if command == "-a" or command in MODES:
        # Prompt words are taken verbatim, including ones that look like options
        prompt = " ".join(rest[1:]).strip()
        if not prompt:
            return _missing_prompt(command)
        run_settings = effective_settings(PersistentConfig(), flags)
        return run_single_prompt("ask" if command == "-a" else command, prompt, run_settings)

    args = parser.parse_args(rest)
    settings = PersistentConfig()
    run_settings = effective_settings(settings, flags)

    if args.command == "chat":
        return run_chat(run_settings)

    if args.command == "models":
        return run_models(settings, run_settings)

    if args.command == "config":
        return run_config(settings, args)

    parser.print_help()
    return 0


def main(argv=None) -> int:
    """Main entry point."""
    try:
        import readline  # noqa: F401  (line editing for input())
    except ImportError:
        pass

    try:
        return run(sys.argv[1:] if argv is None else argv)
    except GPT4AllError as e:
        emsg(f"Error: {e}")
        return 1
    except KeyboardInterrupt:
        print()
        return 130
