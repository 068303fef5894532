"""
Static question pool loading and validation.
"""
import json
import logging
from pathlib import Path
from typing import List, Optional, Union

from .models import Difficulty, Question
from .question_source import EmptyQuestionPoolError, InvalidQuestionError


DEFAULT_QUESTIONS = (
    Question(
        "On which date is Heritage Day celebrated in South Africa?",
        "24 September",
        Difficulty.EASY
    ),
    Question(
        "What was Heritage Day originally known as in KwaZulu-Natal?",
        "Shaka Day",
        Difficulty.MEDIUM
    ),
    Question(
        "In what year was Heritage Day first celebrated as a public holiday in South Africa?",
        "1995",
        Difficulty.HARD
    ),
    Question(
        "What is the popular nickname for Heritage Day celebrations involving outdoor cooking?",
        "Braai Day",
        Difficulty.EASY
    ),
    Question(
        "Name one of the 11 official languages of South Africa.",
        "Answers may include: Afrikaans, English, Ndebele, Northern Sotho, Sotho, "
        "Swazi, Tsonga, Tswana, Venda, Xhosa, or Zulu",
        Difficulty.MEDIUM
    ),
)


class QuestionBank:
    """Loads the fixed question pool used for a game session."""

    def __init__(self, question_file: Optional[Union[str, Path]] = None):
        """
        Initialize QuestionBank.

        Args:
            question_file: Optional JSON file replacing the built-in pool
        """
        self.question_file = Path(question_file) if question_file else None
        self.logger = logging.getLogger(__name__)

    def load(self) -> List[Question]:
        """
        Load the question pool.

        Returns:
            List of Question objects

        Raises:
            InvalidQuestionError: If the question file is unreadable or malformed
            EmptyQuestionPoolError: If the question file holds no questions
        """
        if self.question_file is None:
            self.logger.info(f"Using built-in question pool ({len(DEFAULT_QUESTIONS)} questions)")
            return list(DEFAULT_QUESTIONS)

        try:
            with open(self.question_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise InvalidQuestionError(f"Invalid JSON in {self.question_file}: {e}") from e
        except OSError as e:
            raise InvalidQuestionError(f"Failed to read question file {self.question_file}: {e}") from e

        if isinstance(data, dict) and data.get("questions") == []:
            raise EmptyQuestionPoolError(f"Question file {self.question_file} contains no questions")

        if not self.validate_pool_structure(data):
            raise InvalidQuestionError(f"Invalid question pool structure in {self.question_file}")

        questions = self._parse_questions(data)
        self.logger.info(f"Loaded {len(questions)} questions from {self.question_file}")
        return questions

    def validate_pool_structure(self, data: dict) -> bool:
        """
        Validate that JSON data has the correct question pool structure.

        Expected structure:
        {
            "questions": [
                {
                    "question": str,
                    "answer": str,
                    "difficulty": "easy" | "medium" | "hard"  # Optional
                }
            ]
        }

        Args:
            data: Parsed JSON data to validate

        Returns:
            True if structure is valid, False otherwise
        """
        if not isinstance(data, dict):
            self.logger.error("Question pool must be a JSON object")
            return False

        if "questions" not in data:
            self.logger.error("Question pool must contain a 'questions' key")
            return False

        question_array = data["questions"]
        if not isinstance(question_array, list):
            self.logger.error("'questions' value must be an array")
            return False

        if not question_array:
            self.logger.error("Questions array cannot be empty")
            return False

        valid_difficulties = {d.value for d in Difficulty}
        for i, question_data in enumerate(question_array):
            if not isinstance(question_data, dict):
                self.logger.error(f"Question {i} must be an object")
                return False

            for field_name in ("question", "answer"):
                if field_name not in question_data:
                    self.logger.error(f"Question {i} missing '{field_name}' field")
                    return False
                value = question_data[field_name]
                if not isinstance(value, str) or not value.strip():
                    self.logger.error(f"Question {i} '{field_name}' field must be a non-empty string")
                    return False

            if "difficulty" in question_data:
                if question_data["difficulty"] not in valid_difficulties:
                    self.logger.error(
                        f"Question {i} 'difficulty' must be one of {sorted(valid_difficulties)}"
                    )
                    return False

        return True

    def _parse_questions(self, pool_data: dict) -> List[Question]:
        """Parse validated pool data into Question objects."""
        return [
            Question(
                text=question_data["question"],
                answer=question_data["answer"],
                difficulty=Difficulty(question_data.get("difficulty", Difficulty.MEDIUM.value))
            )
            for question_data in pool_data["questions"]
        ]
