"""
Random question selection for trivia turns.
"""
import logging
import random
from typing import Callable, Optional, Sequence, Union

from .models import Question

logger = logging.getLogger(__name__)


class QuestionPoolError(Exception):
    """Base exception for question pool configuration errors."""
    pass


class EmptyQuestionPoolError(QuestionPoolError):
    """Raised when a question source is built from an empty pool."""
    pass


class InvalidQuestionError(QuestionPoolError):
    """Raised when question pool data does not have the expected structure."""
    pass


RandomLike = Union[random.Random, int, None]


class QuestionSource:
    """
    Supplies questions drawn uniformly at random from a fixed pool.

    Every call to ``next`` is independent and draws with replacement, so the
    same question may come up on consecutive turns. The pool is copied at
    construction and never changes afterwards.
    """

    def __init__(
        self,
        questions: Sequence[Question],
        rng: RandomLike = None,
        chooser: Optional[Callable[[Sequence[Question]], Question]] = None
    ):
        """
        Initialize the question source.

        Args:
            questions: Pool of questions to draw from
            rng: A ``random.Random`` instance or an integer seed
            chooser: Selection function taking the pool and returning one
                question; overrides ``rng`` when given

        Raises:
            EmptyQuestionPoolError: If the pool has no questions
        """
        if not questions:
            raise EmptyQuestionPoolError("Cannot draw questions from an empty pool")

        self._questions = tuple(questions)

        if chooser is not None:
            self._choose = chooser
        else:
            if not isinstance(rng, random.Random):
                rng = random.Random(rng)
            self._choose = rng.choice

        logger.debug(f"QuestionSource created with {len(self._questions)} questions")

    def next(self) -> Question:
        """Return a randomly selected question from the pool."""
        return self._choose(self._questions)

    @property
    def questions(self) -> tuple:
        """The fixed question pool."""
        return self._questions

    def __len__(self) -> int:
        return len(self._questions)
