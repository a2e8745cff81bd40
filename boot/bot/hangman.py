"""Single process-wide hangman game.

The game is only ever touched from the event loop task that runs the
dispatcher, so it carries no locking.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from ..constants import HANGMAN_MAX_ATTEMPTS

GAME_IN_PROGRESS = "A game is already in progress!"
NO_WORDS = "No words available"


def load_words(path: str | Path) -> list[str]:
    """Read a newline separated word list, keeping plain alphabetic words.

    A missing or unreadable file yields an empty list and a warning.
    """
    try:
        with open(path, encoding="utf-8", errors="replace") as f:
            raw = f.read().splitlines()
    except OSError as e:
        logging.warning(f"⚠️ Word list {path} unavailable: {e}")
        return []
    words = [w.strip().lower() for w in raw]
    words = [w for w in words if w and w.isascii() and w.isalpha()]
    logging.debug(f"Loaded {len(words)} hangman words from {path}")
    return words


def _fits(difficulty: str, length: int) -> bool:
    if difficulty == "short":
        return length < 6
    if difficulty == "long":
        return length > 8
    return 4 <= length <= 8


def words_for(difficulty: str, words: Iterable[str]) -> list[str]:
    """Filter ``words`` to a length class; unknown or empty difficulty means medium."""
    return [w for w in words if not w.endswith("'s") and w.isalpha() and _fits(difficulty, len(w))]


@dataclass
class HangmanGame:
    words: list[str] = field(default_factory=list)
    max_attempts: int = HANGMAN_MAX_ATTEMPTS
    secret_word: str = ""
    revealed: list[str | None] = field(default_factory=list)
    wrong_guesses: set[str] = field(default_factory=set)
    attempts: int = 0
    started: bool = False
    rng: random.Random = field(default_factory=random.Random, repr=False)

    @property
    def active(self) -> bool:
        return self.started

    def state_line(self) -> str:
        pattern = " ".join(c if c is not None else "_" for c in self.revealed)
        guessed = " ".join(sorted(self.wrong_guesses)) or "-"
        return f"{pattern} | attempts: {self.attempts}/{self.max_attempts} | guessed: {guessed}"

    def start(self, difficulty: str = "") -> str:
        if self.started:
            return GAME_IN_PROGRESS
        candidates = words_for(difficulty, self.words)
        if not candidates:
            return NO_WORDS
        self.secret_word = self.rng.choice(candidates)
        self.revealed = [None] * len(self.secret_word)
        self.wrong_guesses = set()
        self.attempts = 0
        self.started = True
        logging.info(f"🎮 Hangman started ({difficulty or 'medium'}, {len(self.secret_word)} letters)")
        return self.state_line()

    def guess(self, token: str, source: str) -> str | None:
        """Apply one guess. Returns the reply, or ``None`` when no game is running."""
        if not self.started:
            return None
        token = token.lower()
        if token == self.secret_word:
            return self._win(source)
        if len(token) != 1:
            return self._miss()
        if token in self.wrong_guesses or token in self.revealed:
            return self.state_line()
        if token not in self.secret_word:
            self.wrong_guesses.add(token)
            return self._miss()
        self.revealed = [
            c if c == token else shown for c, shown in zip(self.secret_word, self.revealed, strict=True)
        ]
        if all(c is not None for c in self.revealed):
            return self._win(source)
        return self.state_line()

    def _miss(self) -> str:
        self.attempts += 1
        if self.attempts >= self.max_attempts:
            word = self.secret_word
            self.reset()
            return f"Game over! The word was {word}"
        return self.state_line()

    def _win(self, source: str) -> str:
        word = self.secret_word
        self.reset()
        return f"{source} got it! The word was {word}"

    def reset(self) -> None:
        self.secret_word = ""
        self.revealed = []
        self.wrong_guesses = set()
        self.attempts = 0
        self.started = False
