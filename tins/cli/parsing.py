"""CLI argument parsing utilities."""

from __future__ import annotations

from collections.abc import Sequence

PASSTHROUGH_SEPARATOR = "--"


def split_passthrough_args(argv: Sequence[str]) -> tuple[list[str], list[str]]:
    """Split command-line arguments at the first literal ``--``.

    Everything after the separator is meant for ssh and must not reach fire,
    which gives ``--`` its own meaning.

    Parameters
    ----------
    argv : Sequence[str]
        Arguments without the program name

    Returns
    -------
    tuple[list[str], list[str]]
        (command arguments, passthrough arguments). The passthrough list is
        empty when no separator is present

    Examples
    --------
    >>> split_passthrough_args(["connect", "web", "--", "-L", "8080:localhost:80"])
    (['connect', 'web'], ['-L', '8080:localhost:80'])
    """
    args = list(argv)

    if PASSTHROUGH_SEPARATOR not in args:
        return args, []

    index = args.index(PASSTHROUGH_SEPARATOR)
    return args[:index], args[index + 1 :]


def normalize_identifier(value: object) -> str | None:
    """Convert a fire-parsed positional back to a string.

    fire turns numeric-looking arguments such as ``123`` into ints, while
    names and IDs are always strings to tins.

    Parameters
    ----------
    value : object
        Value as received from fire

    Returns
    -------
    str | None
        String form of the value, or None if it was None
    """
    if value is None:
        return None
    return str(value)
