"""boot: an IRC chat-bot with link titles, lookups, notifications and hangman."""

__version__ = "1.0.0"
