"""Terminal user interface components."""

from tins.tui.selector import InstanceSelector, select_instance

__all__ = ["InstanceSelector", "select_instance"]
