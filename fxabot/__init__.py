"""fxabot: a GitHub bot that answers commands in issue comments."""

__version__ = "0.1.0"
