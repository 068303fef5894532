"""
Configuration manager for Team Trivia Board game settings.
"""
import json
import logging
from typing import Optional, Dict, Any, List
from pathlib import Path

from .models import GameSettings


class ConfigManager:
    """Manages game configuration settings."""

    # Default configuration values
    DEFAULT_TEAM_COUNT = 4
    DEFAULT_TURN_DURATION = 30
    DEFAULT_LOW_TIME_THRESHOLD = 5
    DEFAULT_QUESTION_FILE = None  # Built-in question pool

    # Validation limits
    MIN_TEAM_COUNT = 2
    MAX_TEAM_COUNT = 8
    MIN_TURN_DURATION = 5
    MAX_TURN_DURATION = 300  # 5 minutes

    def __init__(self):
        """Initialize ConfigManager with default settings."""
        self.logger = logging.getLogger(__name__)
        self._global_settings = GameSettings()
        self._question_file: Optional[str] = self.DEFAULT_QUESTION_FILE

    def get_game_settings(self) -> GameSettings:
        """
        Get current game settings.

        Returns:
            GameSettings object with current configuration
        """
        return GameSettings(
            team_count=self._global_settings.team_count,
            turn_duration=self._global_settings.turn_duration,
            low_time_threshold=self._global_settings.low_time_threshold
        )

    def _validate_int(self, value: Any, label: str, minimum: int, maximum: int) -> Optional[Dict[str, Any]]:
        # bool is an int subclass but never a valid count
        if not isinstance(value, int) or isinstance(value, bool):
            error_msg = f"{label} must be an integer, got {type(value).__name__}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ Invalid input: Expected a number, got {type(value).__name__}"
            }

        if value < minimum:
            error_msg = f"{label} must be at least {minimum}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ {label} too small: Minimum is {minimum}"
            }

        if value > maximum:
            error_msg = f"{label} cannot exceed {maximum}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ {label} too large: Maximum is {maximum}"
            }

        return None

    def set_team_count(self, count: int) -> Dict[str, Any]:
        """
        Set the number of teams taking turns.

        Args:
            count: Number of teams

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        failure = self._validate_int(count, "Team count", self.MIN_TEAM_COUNT, self.MAX_TEAM_COUNT)
        if failure:
            return failure

        self._global_settings.team_count = count
        self.logger.info(f"Team count set to {count}")
        return {
            'success': True,
            'message': f"Team count set to {count}",
            'user_message': f"✅ {count} teams will take turns"
        }

    def get_team_count(self) -> int:
        """Get current team count setting."""
        return self._global_settings.team_count

    def set_turn_duration(self, duration: int) -> Dict[str, Any]:
        """
        Set the countdown length of each turn.

        The low-time threshold is clamped down if it would exceed the new duration.

        Args:
            duration: Turn duration in seconds

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        failure = self._validate_int(
            duration, "Turn duration", self.MIN_TURN_DURATION, self.MAX_TURN_DURATION
        )
        if failure:
            return failure

        self._global_settings.turn_duration = duration
        if self._global_settings.low_time_threshold > duration:
            self._global_settings.low_time_threshold = duration
            self.logger.warning(f"Low time threshold clamped to {duration} seconds")

        self.logger.info(f"Turn duration set to {duration} seconds")
        return {
            'success': True,
            'message': f"Turn duration set to {duration} seconds",
            'user_message': f"✅ Each turn lasts {duration} seconds"
        }

    def get_turn_duration(self) -> int:
        """Get current turn duration setting in seconds."""
        return self._global_settings.turn_duration

    def set_low_time_threshold(self, seconds: int) -> Dict[str, Any]:
        """
        Set how many seconds before expiry the low-time warning starts.

        Args:
            seconds: Threshold in seconds, 0 disables the warning

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        failure = self._validate_int(
            seconds, "Low time threshold", 0, self._global_settings.turn_duration
        )
        if failure:
            return failure

        self._global_settings.low_time_threshold = seconds
        self.logger.info(f"Low time threshold set to {seconds} seconds")
        return {
            'success': True,
            'message': f"Low time threshold set to {seconds} seconds",
            'user_message': f"✅ Low-time warning starts at {seconds} seconds"
        }

    def get_low_time_threshold(self) -> int:
        """Get current low-time warning threshold in seconds."""
        return self._global_settings.low_time_threshold

    def set_question_file(self, path: Optional[str]) -> Dict[str, Any]:
        """
        Set the JSON file supplying the question pool.

        Args:
            path: Path to a question file, or None for the built-in pool

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        if path is None:
            self._question_file = None
            self.logger.info("Using built-in question pool")
            return {
                'success': True,
                'message': "Using built-in question pool",
                'user_message': "✅ Using the built-in question pool"
            }

        if not isinstance(path, str) or not path.strip():
            error_msg = "Question file must be a non-empty path string"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': "❌ Question file path cannot be empty"
            }

        question_path = Path(path)
        if question_path.suffix.lower() != ".json":
            error_msg = f"Question file must be a JSON file: {path}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ Question file must end in .json: {path}"
            }

        if not question_path.is_file():
            error_msg = f"Question file not found: {path}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ Question file not found: {path}"
            }

        self._question_file = str(question_path)
        self.logger.info(f"Question file set to {question_path}")
        return {
            'success': True,
            'message': f"Question file set to {question_path}",
            'user_message': f"✅ Questions will be loaded from {question_path}"
        }

    def get_question_file(self) -> Optional[str]:
        """Get the configured question file, or None for the built-in pool."""
        return self._question_file

    def load_config_file(self, path: str = "config.json") -> Dict[str, Any]:
        """
        Read a config.json file.

        Args:
            path: Location of the configuration file

        Returns:
            Dictionary with success status, the parsed ``config`` or an error
            message, and a user-friendly message
        """
        config_path = Path(path)
        if not config_path.is_file():
            error_msg = f"Configuration file not found: {config_path}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ {config_path} not found! Copy config.json and set your Discord bot token."
            }

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            error_msg = f"Invalid JSON in {config_path}: {e}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ Invalid JSON in {config_path}: {e}"
            }
        except OSError as e:
            error_msg = f"Error reading {config_path}: {e}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ Could not read {config_path}: {e}"
            }

        if not isinstance(config, dict):
            error_msg = f"Configuration in {config_path} must be a JSON object"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ {config_path} must contain a JSON object"
            }

        self.logger.info(f"Loaded configuration from {config_path}")
        return {
            'success': True,
            'config': config,
            'message': f"Loaded configuration from {config_path}",
            'user_message': f"✅ Loaded {config_path}"
        }

    def apply_config(self, config: Dict[str, Any]) -> List[str]:
        """
        Apply the ``game`` section of a loaded config.json.

        Invalid values are logged and skipped so defaults stay in effect.

        Args:
            config: Parsed configuration dictionary

        Returns:
            List of error messages for settings that were rejected
        """
        game_config = config.get('game', {}) or {}
        errors = []

        # Duration before threshold so the threshold is validated against it
        setters = (
            ('team_count', self.set_team_count),
            ('turn_duration', self.set_turn_duration),
            ('low_time_threshold', self.set_low_time_threshold),
            ('question_file', self.set_question_file),
        )
        for key, setter in setters:
            if key not in game_config:
                continue
            result = setter(game_config[key])
            if not result['success']:
                errors.append(result['error'])

        if errors:
            self.logger.warning(f"Configuration applied with {len(errors)} rejected settings")
        else:
            self.logger.info("Configuration applied successfully")
        return errors

    def reset_to_defaults(self) -> None:
        """Reset all settings to their default values."""
        self._global_settings = GameSettings(
            team_count=self.DEFAULT_TEAM_COUNT,
            turn_duration=self.DEFAULT_TURN_DURATION,
            low_time_threshold=self.DEFAULT_LOW_TIME_THRESHOLD
        )
        self._question_file = self.DEFAULT_QUESTION_FILE
        self.logger.info("All settings reset to default values")

    def validate_settings(self) -> Dict[str, Any]:
        """
        Validate current settings and return validation results.

        Returns:
            Dictionary with validation results and any issues found
        """
        validation_result = {
            "valid": True,
            "issues": []
        }
        settings = self._global_settings

        if not self.MIN_TEAM_COUNT <= settings.team_count <= self.MAX_TEAM_COUNT:
            validation_result["valid"] = False
            validation_result["issues"].append(f"Invalid team count: {settings.team_count}")

        if not self.MIN_TURN_DURATION <= settings.turn_duration <= self.MAX_TURN_DURATION:
            validation_result["valid"] = False
            validation_result["issues"].append(f"Invalid turn duration: {settings.turn_duration}")

        if not 0 <= settings.low_time_threshold <= settings.turn_duration:
            validation_result["valid"] = False
            validation_result["issues"].append(
                f"Invalid low time threshold: {settings.low_time_threshold}"
            )

        return validation_result

    def get_settings_summary(self) -> str:
        """
        Get a formatted summary of current settings.

        Returns:
            Human-readable string describing current settings
        """
        question_source = self._question_file or "built-in"
        return (
            f"Game Settings:\n"
            f"• Teams: {self._global_settings.team_count}\n"
            f"• Turn: {self._global_settings.turn_duration} seconds\n"
            f"• Low-time warning: {self._global_settings.low_time_threshold} seconds\n"
            f"• Questions: {question_source}"
        )
