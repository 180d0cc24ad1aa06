"""Argument splitting for resolved commands."""

from typing import List

COMMAND_DELIMITER = " "


def extract_sub_arguments(full_arguments: str, command_name: str) -> List[str]:
    """Strip the command out of the arguments and return the rest as tokens.

    Only the first occurrence of ``command_name`` is removed, wherever it
    appears. The remainder is trimmed and then split on single spaces, so
    runs of spaces inside it produce empty tokens: ``"build a  b"`` with
    ``"build"`` gives ``["a", "", "b"]``. An empty remainder gives ``[]``.

    Args:
        full_arguments: The full argument string, command included.
        command_name: The name of the command to strip.
    """
    remainder = full_arguments.replace(command_name, "", 1).strip()
    tokens = remainder.split(COMMAND_DELIMITER)
    if tokens == [""]:
        return []
    return tokens


def join_arguments(arguments: List[str]) -> str:
    """Rejoin argument tokens with the command delimiter."""
    return COMMAND_DELIMITER.join(arguments)
