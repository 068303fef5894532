"""
Core data models for the Team Trivia Board.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class Difficulty(Enum):
    """Question difficulty levels."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class TurnPhase(Enum):
    """Phase of the current team's turn."""
    IDLE = "idle"
    IN_PROGRESS = "in_progress"


class GameEvent(Enum):
    """Notifications emitted by the turn engine for presenters."""
    TURN_STARTED = "turn_started"
    LOW_TIME_WARNING = "low_time_warning"
    TIME_EXPIRED = "time_expired"
    CORRECT = "correct"
    INCORRECT = "incorrect"
    GAME_RESET = "game_reset"


@dataclass(frozen=True)
class Question:
    """Represents a single trivia question."""
    text: str
    answer: str
    difficulty: Difficulty = Difficulty.MEDIUM


@dataclass
class GameSettings:
    """Configuration settings for a game."""
    team_count: int = 4
    turn_duration: int = 30
    low_time_threshold: int = 5


@dataclass(frozen=True)
class GameState:
    """Read-only snapshot of the turn engine."""
    scores: Tuple[int, ...]
    current_team: int
    time_remaining: int
    timer_active: bool
    active_question: Optional[Question]
    answer_revealed: bool

    @property
    def phase(self) -> TurnPhase:
        if self.active_question is None:
            return TurnPhase.IDLE
        return TurnPhase.IN_PROGRESS

    @property
    def is_expired(self) -> bool:
        """True when a question is shown but its clock has run out."""
        return (
            self.active_question is not None
            and not self.timer_active
            and self.time_remaining == 0
        )

    @property
    def team_count(self) -> int:
        return len(self.scores)

    @property
    def leaders(self) -> Tuple[int, ...]:
        """Team ids holding the top score; empty before anyone scores."""
        top = max(self.scores, default=0)
        if top == 0:
            return ()
        return tuple(team for team, score in enumerate(self.scores) if score == top)


def team_label(team: int) -> str:
    """Human-facing name for a 0-based team id."""
    return f"Team {team + 1}"
