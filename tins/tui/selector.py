"""Keyboard-driven instance picker."""

from __future__ import annotations

import contextlib
from collections.abc import Sequence

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Label, OptionList

SELECTOR_PROMPT = "? Select an instance (Use arrow keys)"


class InstanceSelector(App[int]):
    """Single-choice list of instances.

    Up and down move the highlight, Enter confirms and Escape or Ctrl+C
    cancel. The app's return value is the selected index, or None when
    cancelled.

    Parameters
    ----------
    options : Sequence[str]
        Display rows, one per instance
    prompt : str
        Line shown above the list
    """

    CSS = """
    #selector-prompt {
        text-style: bold;
        padding-bottom: 1;
    }

    #selector-options {
        height: auto;
        border: none;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel", priority=True),
        Binding("ctrl+c", "cancel", "Cancel", priority=True),
    ]

    def __init__(self, options: Sequence[str], prompt: str = SELECTOR_PROMPT) -> None:
        super().__init__()
        self.options = list(options)
        self.prompt = prompt

    def compose(self) -> ComposeResult:
        """Compose the prompt and the option list."""
        yield Label(self.prompt, id="selector-prompt")
        yield OptionList(*self.options, id="selector-options")

    def on_mount(self) -> None:
        """Focus the option list so arrow keys work immediately."""
        with contextlib.suppress(ValueError, AttributeError, RuntimeError):
            self.query_one("#selector-options", OptionList).focus()

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        """Exit with the index of the confirmed option.

        Parameters
        ----------
        event : OptionList.OptionSelected
            Selection event carrying the option index
        """
        self.exit(event.option_index)

    def action_cancel(self) -> None:
        """Exit without a selection."""
        self.exit(None)


def select_instance(options: Sequence[str]) -> int | None:
    """Let the user pick one of the given rows.

    Parameters
    ----------
    options : Sequence[str]
        Display rows

    Returns
    -------
    int | None
        Index of the chosen row, or None if the user cancelled or there was
        nothing to choose from
    """
    if not options:
        return None

    return InstanceSelector(options).run()
