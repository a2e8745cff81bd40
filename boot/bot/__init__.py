"""Bot core: classification, dispatch, game state and the event runner."""

from .classifier import HELP_TEXT, REPO_URL, classify
from .dispatcher import Dispatcher
from .hangman import HangmanGame, load_words
from .models import Event, EventKind, OutboundReply
from .runner import BotRunner
from .sink import ReplySink

__all__ = [
    "BotRunner",
    "Dispatcher",
    "Event",
    "EventKind",
    "HELP_TEXT",
    "HangmanGame",
    "OutboundReply",
    "REPO_URL",
    "ReplySink",
    "classify",
    "load_words",
]
