"""Timed exam session: answer, navigate, count down, submit"""

import logging
import random
from enum import Enum
from typing import Callable, List, Optional

from evaluation.answer_evaluator import AnswerEvaluator, is_unanswered
from models.errors import SessionStateError
from models.schemas import (
    ExamConfig,
    ExamResult,
    Question,
    QuestionType,
    UserAnswer,
    per_question_seconds,
    to_user_answer,
)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class ExamState(str, Enum):
    ACTIVE = "active"
    SUBMITTING = "submitting"
    COMPLETED = "completed"


class ExamSession:
    """State machine for one timed exam.

    ACTIVE -> SUBMITTING -> COMPLETED. Answers can be changed for any
    question while ACTIVE. Submission happens on request or when the
    countdown reaches zero, evaluates every question in order and emits the
    ExamResult through ``on_finish``. If an evaluation raises, the error
    propagates and the session stays in SUBMITTING.
    """

    def __init__(
        self,
        questions: List[Question],
        config: ExamConfig,
        evaluator: AnswerEvaluator,
        on_finish: Optional[Callable[[ExamResult], None]] = None,
        rng: Optional[random.Random] = None,
    ):
        if not questions:
            raise ValueError("An exam needs at least one question")

        self.questions = list(questions)
        self.config = config
        self.evaluator = evaluator
        self.on_finish = on_finish

        self.state = ExamState.ACTIVE
        self.current_index = 0
        self.answers: List[Optional[UserAnswer]] = [None] * len(self.questions)
        self.total_time = per_question_seconds(config.intensity) * len(self.questions)
        self.time_left = self.total_time
        self.result: Optional[ExamResult] = None

        # Matching answers are shown in a shuffled order, fixed for the session
        rng = rng or random.Random()
        self._matching_choices = {
            idx: rng.sample([pair.answer for pair in q.matching_pairs], k=len(q.matching_pairs))
            for idx, q in enumerate(self.questions)
            if q.type == QuestionType.MATCHING
        }
        logger.info(
            f"Exam started: {len(self.questions)} questions, {self.total_time}s ({config.intensity.value})"
        )

    @property
    def question_count(self) -> int:
        return len(self.questions)

    @property
    def current_question(self) -> Question:
        return self.questions[self.current_index]

    @property
    def is_last_question(self) -> bool:
        return self.current_index == self.question_count - 1

    @property
    def progress(self) -> float:
        return (self.current_index + 1) / self.question_count

    @property
    def answered_count(self) -> int:
        return sum(1 for answer in self.answers if not is_unanswered(answer))

    def matching_choices(self, index: int) -> List[str]:
        return list(self._matching_choices.get(index, []))

    def _require_active(self, action: str):
        if self.state != ExamState.ACTIVE:
            raise SessionStateError(f"Cannot {action}: exam is {self.state.value}")

    def answer(self, index: int, value) -> None:
        """Overwrite the answer for question ``index`` (any question, not only the current one)"""
        self._require_active("answer")
        if not 0 <= index < self.question_count:
            raise IndexError(f"Question index {index} out of range 0..{self.question_count - 1}")
        self.answers[index] = to_user_answer(value)

    def answer_current(self, value) -> None:
        self.answer(self.current_index, value)

    def next(self) -> int:
        self._require_active("move to the next question")
        if self.current_index < self.question_count - 1:
            self.current_index += 1
        return self.current_index

    def previous(self) -> int:
        self._require_active("move to the previous question")
        if self.current_index > 0:
            self.current_index -= 1
        return self.current_index

    def tick(self, seconds: int = 1) -> Optional[ExamResult]:
        """Advance the countdown; at zero the exam is submitted and its result returned"""
        if self.state != ExamState.ACTIVE:
            return None
        self.time_left = max(0, self.time_left - seconds)
        if self.time_left == 0:
            logger.info("Time is up, submitting exam")
            return self.submit()
        return None

    def submit(self) -> Optional[ExamResult]:
        """Evaluate every answer in order and finish the exam.

        Returns None when the exam is already being submitted or is complete.
        """
        if self.state != ExamState.ACTIVE:
            logger.warning(f"Submit ignored: exam is {self.state.value}")
            return None

        self.state = ExamState.SUBMITTING
        logger.info(f"Submitting exam: {self.answered_count}/{self.question_count} answered")

        evaluations = []
        for idx, (question, answer) in enumerate(zip(self.questions, self.answers), 1):
            logger.info(f"Evaluating question {idx}/{self.question_count}: {question.topic}")
            evaluations.append(self.evaluator.evaluate(question, answer))

        self.result = ExamResult(
            questions=self.questions,
            user_answers=self.answers,
            evaluations=evaluations,
            time_taken=self.total_time - self.time_left,
            config=self.config,
        )
        self.state = ExamState.COMPLETED
        logger.info("✓ Exam completed")

        if self.on_finish:
            self.on_finish(self.result)
        return self.result
