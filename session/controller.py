"""Application service behind the study screens"""

import logging
from typing import List, Optional, Tuple

from evaluation.answer_evaluator import AnswerEvaluator
from generation.question_generator import QuestionGenerator
from models.errors import AuthenticationRequiredError, GenerationError, InputValidationError
from models.schemas import ExamConfig, ExamResult, Material, PracticeConfig
from session.exam_session import ExamSession
from session.practice_session import PracticeSession
from storage.history import HistoryStore

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class StudyController:
    """Starts exams and practice quizzes for a signed-in user and records results.

    ``user`` is whatever identity the auth provider hands over; None means
    nobody is signed in and every operation is refused.
    """

    def __init__(
        self,
        user,
        generator: QuestionGenerator,
        evaluator: AnswerEvaluator,
        history: HistoryStore,
    ):
        self.user = user
        self.generator = generator
        self.evaluator = evaluator
        self.history = history
        self.history_loaded = False

    def _require_user(self):
        if self.user is None:
            raise AuthenticationRequiredError("Please sign in to continue.")

    def _require_materials(self, materials: List[Material]):
        if not materials:
            raise InputValidationError("Please upload at least one course material file.")

    def load_history(self) -> Tuple[ExamResult, ...]:
        self._require_user()
        if not self.history_loaded:
            self.history.load()
            self.history_loaded = True
        return self.history.results

    def extract_topics(self, materials: List[Material]) -> List[str]:
        self._require_user()
        self._require_materials(materials)
        return self.generator.extract_topics(materials)

    def start_exam(self, config: ExamConfig, materials: List[Material]) -> ExamSession:
        self._require_user()
        self._require_materials(materials)

        questions = self.generator.generate_exam(config, materials)
        if not questions:
            raise GenerationError(
                "The AI could not generate an exam from the provided materials. "
                "Please try different files or settings."
            )
        return ExamSession(questions, config, self.evaluator, on_finish=self.record_result)

    def start_practice(self, config: PracticeConfig, materials: List[Material]) -> PracticeSession:
        self._require_user()
        self._require_materials(materials)
        if not config.topics:
            raise InputValidationError("Please select at least one topic for your practice quiz.")
        if not config.question_types:
            raise InputValidationError("Please select at least one question type.")

        questions = self.generator.generate_practice_quiz(config)
        if not questions:
            raise GenerationError(
                "The AI could not generate a practice quiz with the selected options. Please try again."
            )
        return PracticeSession(questions, self.evaluator)

    def record_result(self, result: ExamResult) -> None:
        """Add a finished exam to the front of the history"""
        self._require_user()
        self.load_history()
        self.history.append(result)
        logger.info(f"Recorded exam result ({len(self.history.results)} in history)")

    @property
    def latest_result(self) -> Optional[ExamResult]:
        results = self.history.results
        return results[0] if results else None
