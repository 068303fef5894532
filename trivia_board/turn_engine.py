"""
Turn engine core logic for the Team Trivia Board.
Handles team rotation, the per-turn countdown state, answer reveal and scoring.
"""
import dataclasses
import logging
import time
from typing import Callable, List, Optional

from .models import GameEvent, GameSettings, GameState, Question, team_label
from .question_source import QuestionSource

# Set up logger for turn operations
logger = logging.getLogger(__name__)

Listener = Callable[[GameEvent, GameState], None]


class TurnLifecycleLogger:
    """Structured logging for turn lifecycle events."""

    @staticmethod
    def log_turn_started(team: int, question: Question, duration: int) -> None:
        """Log the start of a team's turn."""
        logger.info(
            f"Turn lifecycle: STARTED - {team_label(team)}, Duration {duration}s, "
            f"Difficulty {question.difficulty.value}",
            extra={
                'event_type': 'turn_started',
                'team': team,
                'difficulty': question.difficulty.value,
                'duration': duration,
                'timestamp': time.time()
            }
        )

    @staticmethod
    def log_start_rejected(team: int, remaining_time: int) -> None:
        """Log a start request ignored because the clock is running."""
        logger.debug(
            f"Turn lifecycle: START_REJECTED - {team_label(team)}, timer running with {remaining_time}s left",
            extra={
                'event_type': 'turn_start_rejected',
                'team': team,
                'remaining_time': remaining_time,
                'timestamp': time.time()
            }
        )

    @staticmethod
    def log_tick(team: int, remaining_time: int, total_duration: int) -> None:
        """Log countdown ticks (throttled to avoid spam)."""
        if remaining_time % 10 == 0 or remaining_time <= 5:
            logger.debug(
                f"Turn lifecycle: TICK - {team_label(team)}, Remaining {remaining_time}s of {total_duration}s",
                extra={
                    'event_type': 'turn_tick',
                    'team': team,
                    'remaining_time': remaining_time,
                    'total_duration': total_duration,
                    'timestamp': time.time()
                }
            )

    @staticmethod
    def log_time_expired(team: int) -> None:
        """Log the countdown reaching zero."""
        logger.info(
            f"Turn lifecycle: TIME_EXPIRED - {team_label(team)}, awaiting judgment",
            extra={
                'event_type': 'turn_time_expired',
                'team': team,
                'timestamp': time.time()
            }
        )

    @staticmethod
    def log_judgment(team: int, correct: bool, new_score: int, next_team: int) -> None:
        """Log a correctness judgment and the team hand-off."""
        result = "CORRECT" if correct else "INCORRECT"
        logger.info(
            f"Turn lifecycle: JUDGED {result} - {team_label(team)} now has {new_score}, "
            f"next up {team_label(next_team)}",
            extra={
                'event_type': 'turn_judged',
                'team': team,
                'correct': correct,
                'score': new_score,
                'next_team': next_team,
                'timestamp': time.time()
            }
        )

    @staticmethod
    def log_ignored_action(action: str, reason: str) -> None:
        """Log an action that was a no-op in the current state."""
        logger.debug(
            f"Turn lifecycle: IGNORED - {action} ({reason})",
            extra={
                'event_type': 'turn_action_ignored',
                'action': action,
                'reason': reason,
                'timestamp': time.time()
            }
        )

    @staticmethod
    def log_listener_error(event: GameEvent, error: Exception) -> None:
        """Log a failure raised by a notification listener."""
        logger.error(
            f"Turn lifecycle: LISTENER_ERROR - Event {event.value}, {type(error).__name__}: {error}",
            extra={
                'event_type': 'turn_listener_error',
                'game_event': event.value,
                'error_type': type(error).__name__,
                'error_message': str(error),
                'timestamp': time.time()
            }
        )


class TurnEngine:
    """
    Owns the game state and enforces the legal sequence of turn actions.

    A turn is Idle (no question, clock stopped) until ``start_turn``; it is
    then In Progress until ``judge`` hands play to the next team. The engine
    never schedules anything itself: an external driver calls ``tick`` once
    per second for as long as ``timer_active`` is True.

    Every action is total. Calls that make no sense in the current state are
    ignored and return False instead of raising.
    """

    def __init__(self, question_source: QuestionSource, settings: Optional[GameSettings] = None):
        """
        Initialize the turn engine.

        Args:
            question_source: Supplies a question for each new turn
            settings: Team count, turn duration and low-time threshold

        Raises:
            ValueError: If the settings cannot describe a playable game
        """
        # Private copy; later edits to the caller's object must not reach the game
        settings = dataclasses.replace(settings) if settings else GameSettings()
        if settings.team_count < 1:
            raise ValueError(f"Team count must be at least 1, got {settings.team_count}")
        if settings.turn_duration < 1:
            raise ValueError(f"Turn duration must be at least 1 second, got {settings.turn_duration}")
        if not 0 <= settings.low_time_threshold <= settings.turn_duration:
            raise ValueError(
                f"Low time threshold must be between 0 and {settings.turn_duration}, "
                f"got {settings.low_time_threshold}"
            )

        self._source = question_source
        self._settings = settings
        self._listeners: List[Listener] = []
        self._reset_state()

        logger.info(
            f"TurnEngine initialized with {settings.team_count} teams, "
            f"{settings.turn_duration}s turns"
        )

    def _reset_state(self) -> None:
        self._scores = [0] * self._settings.team_count
        self._current_team = 0
        self._time_remaining = self._settings.turn_duration
        self._timer_active = False
        self._active_question: Optional[Question] = None
        self._answer_revealed = False

    # Actions

    def start_turn(self) -> bool:
        """
        Start the current team's turn with a fresh question and a full clock.

        Returns:
            True if a turn was started, False if the clock was already running
        """
        if self._timer_active:
            TurnLifecycleLogger.log_start_rejected(self._current_team, self._time_remaining)
            return False

        self._active_question = self._source.next()
        self._time_remaining = self._settings.turn_duration
        self._timer_active = True
        self._answer_revealed = False

        TurnLifecycleLogger.log_turn_started(
            self._current_team, self._active_question, self._settings.turn_duration
        )
        self._notify(GameEvent.TURN_STARTED)
        return True

    def tick(self) -> bool:
        """
        Advance the countdown by one second.

        Returns:
            True if the clock moved, False if it was not running
        """
        if not self._timer_active:
            return False

        self._time_remaining -= 1
        TurnLifecycleLogger.log_tick(
            self._current_team, self._time_remaining, self._settings.turn_duration
        )

        if self._time_remaining <= 0:
            self._time_remaining = 0
            self._timer_active = False
            TurnLifecycleLogger.log_time_expired(self._current_team)
            self._notify(GameEvent.TIME_EXPIRED)
        elif self._time_remaining <= self._settings.low_time_threshold:
            self._notify(GameEvent.LOW_TIME_WARNING)

        return True

    def toggle_answer(self) -> bool:
        """
        Show or hide the answer to the active question.

        Returns:
            True if the reveal flag flipped, False if there is no active question
        """
        if self._active_question is None:
            TurnLifecycleLogger.log_ignored_action("toggle_answer", "no active question")
            return False

        self._answer_revealed = not self._answer_revealed
        return True

    def judge(self, correct: bool) -> bool:
        """
        Record the judgment for the active question and pass play to the next team.

        Args:
            correct: Whether the current team answered correctly

        Returns:
            True if a judgment was recorded, False if there is no active question
        """
        if self._active_question is None:
            TurnLifecycleLogger.log_ignored_action("judge", "no active question")
            return False

        team = self._current_team
        self._timer_active = False
        if correct:
            self._scores[team] += 1

        self._current_team = (team + 1) % len(self._scores)
        self._active_question = None
        self._answer_revealed = False

        TurnLifecycleLogger.log_judgment(team, correct, self._scores[team], self._current_team)
        self._notify(GameEvent.CORRECT if correct else GameEvent.INCORRECT)
        return True

    def reset(self) -> None:
        """Start a new game: zero the scores and hand play back to the first team."""
        self._reset_state()
        logger.info("TurnEngine reset for a new game")
        self._notify(GameEvent.GAME_RESET)

    # Observation

    def snapshot(self) -> GameState:
        """Return a read-only view of the current state."""
        return GameState(
            scores=tuple(self._scores),
            current_team=self._current_team,
            time_remaining=self._time_remaining,
            timer_active=self._timer_active,
            active_question=self._active_question,
            answer_revealed=self._answer_revealed
        )

    def add_listener(self, listener: Listener) -> None:
        """Register a callable invoked as ``listener(event, state)`` after each notification."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> bool:
        """Unregister a listener. Returns False if it was not registered."""
        try:
            self._listeners.remove(listener)
            return True
        except ValueError:
            return False

    def _notify(self, event: GameEvent) -> None:
        state = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(event, state)
            except Exception as e:
                TurnLifecycleLogger.log_listener_error(event, e)

    @property
    def settings(self) -> GameSettings:
        return dataclasses.replace(self._settings)

    @property
    def scores(self) -> tuple:
        return tuple(self._scores)

    @property
    def current_team(self) -> int:
        return self._current_team

    @property
    def time_remaining(self) -> int:
        return self._time_remaining

    @property
    def timer_active(self) -> bool:
        return self._timer_active

    @property
    def active_question(self) -> Optional[Question]:
        return self._active_question

    @property
    def answer_revealed(self) -> bool:
        return self._answer_revealed
