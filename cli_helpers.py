"""
cli_helpers.py

Prompt helpers shared by the interactive menus.
"""

from __future__ import annotations
from typing import Optional


def input_prompt(prompt: str) -> str:
    """
    Wrapper around built-in input() that returns a stripped string and handles interrupts.

    Returns an empty string on EOF/KeyboardInterrupt.
    """
    try:
        return input(prompt).strip()
    except (EOFError, KeyboardInterrupt):
        print()
        return ""


def read_choice(prompt: str) -> Optional[str]:
    """
    Read a menu choice. Returns None when input is closed (EOF/KeyboardInterrupt).
    """
    try:
        return input(prompt).strip()
    except (EOFError, KeyboardInterrupt):
        print()
        return None


def prompt_int(prompt: str) -> Optional[int]:
    """
    Ask for an integer. Prints a notice and returns None when the answer is not a number.
    """
    raw = input_prompt(prompt)
    try:
        return int(raw)
    except ValueError:
        print(f"Not a number: {raw!r}")
        return None
