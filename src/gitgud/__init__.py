"""GitGud: a git wrapper with AI-generated commit messages."""

__version__ = "0.3.0"
