"""tins - temporary OpenStack instances with per-instance SSH keys."""

__version__ = "0.1.0"
