"""
Team Trivia Board: a turn-based team trivia game controller.
"""
from .models import Difficulty, GameEvent, GameSettings, GameState, Question, TurnPhase
from .question_source import EmptyQuestionPoolError, QuestionSource
from .turn_engine import TurnEngine

__all__ = [
    "Difficulty",
    "EmptyQuestionPoolError",
    "GameEvent",
    "GameSettings",
    "GameState",
    "Question",
    "QuestionSource",
    "TurnEngine",
    "TurnPhase",
]
