"""
System prompts for the single-prompt modes.
"""

from typing import Optional

from .utils import get_os_version

SUGGEST_DETAILED_PROMPT = """You are an expert technical assistant. The user is using a system with the following OS: {os_info}. When providing suggestions, give detailed, step-by-step instructions that the user can follow to achieve their goals. Include relevant commands, code snippets, or configurations as needed. Avoid unnecessary explanations or background information. Tailor your suggestions to be relevant to the user's operating system and environment.
Attempt to make it a single line response where possible. Prefer commands and code snippets over lengthy explanations. Always leave commands and codes in their own line for easy copying."""

SUGGEST_PROMPT = """You are an expert technical assistant. The user is using a system with the following OS: {os_info}. Provide concise and practical suggestions to help the user accomplish their tasks efficiently. Focus on clarity and brevity, ensuring that your suggestions are easy to understand and implement. Tailor your suggestions to be relevant to the user's operating system and environment. Avoid lengthy explanations or unnecessary details, prefer single line commands or codes. If you must include explanations make sure the commands and codes are in their own line for easy copying."""

ASK_PROMPT = "Provide a helpful and accurate response to the user's question."

EXPLAIN_PROMPT = "Explain step-by-step with a short example if helpful."

MODES = ("ask", "suggest", "explain")


def build_system_prompt(mode: str, detailed_suggest: bool = False) -> Optional[str]:
    """System prompt for a mode, None for modes without one (chat)."""
    if mode == "suggest":
        template = SUGGEST_DETAILED_PROMPT if detailed_suggest else SUGGEST_PROMPT
        return template.format(os_info=get_os_version())
    if mode == "ask":
        return ASK_PROMPT
    if mode == "explain":
        return EXPLAIN_PROMPT
    return None


def build_messages(mode: str, prompt: str, detailed_suggest: bool = False):
    """Message list for a single prompt."""
    messages = []
    system = build_system_prompt(mode, detailed_suggest)
    if system:
        messages.append({"role": "system", "content": system})
    messages.append({"role": "user", "content": prompt})
    return messages
