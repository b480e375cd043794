"""Untimed practice session: answer, check, advance"""

import logging
import random
from enum import Enum
from typing import List, Optional, Tuple

from evaluation.answer_evaluator import AnswerEvaluator
from models.errors import SessionStateError
from models.schemas import Evaluation, Question, QuestionType, UserAnswer, to_user_answer

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class PracticeState(str, Enum):
    ANSWERING = "answering"
    CHECKED = "checked"
    FINISHED = "finished"


class PracticeSession:
    """Each question is answered, checked once, then the user moves on"""

    def __init__(self, questions: List[Question], evaluator: AnswerEvaluator, rng: Optional[random.Random] = None):
        if not questions:
            raise ValueError("A practice quiz needs at least one question")

        self.questions = list(questions)
        self.evaluator = evaluator
        self.state = PracticeState.ANSWERING
        self.current_index = 0
        self.current_answer: Optional[UserAnswer] = None
        self.evaluation: Optional[Evaluation] = None
        self.correct_count = 0

        rng = rng or random.Random()
        self._matching_choices = {
            idx: rng.sample([pair.answer for pair in q.matching_pairs], k=len(q.matching_pairs))
            for idx, q in enumerate(self.questions)
            if q.type == QuestionType.MATCHING
        }

    @property
    def question_count(self) -> int:
        return len(self.questions)

    @property
    def current_question(self) -> Question:
        return self.questions[self.current_index]

    @property
    def progress(self) -> float:
        return (self.current_index + 1) / self.question_count

    @property
    def score(self) -> Tuple[int, int]:
        """(correct answers, total questions)"""
        return self.correct_count, self.question_count

    def matching_choices(self, index: int) -> List[str]:
        return list(self._matching_choices.get(index, []))

    def answer(self, value) -> None:
        if self.state != PracticeState.ANSWERING:
            raise SessionStateError(f"Cannot answer: practice question is {self.state.value}")
        self.current_answer = to_user_answer(value)

    def check(self) -> Evaluation:
        """Evaluate the current answer; allowed once per question"""
        if self.state != PracticeState.ANSWERING:
            raise SessionStateError(f"Cannot check: practice question is {self.state.value}")

        self.evaluation = self.evaluator.evaluate(self.current_question, self.current_answer)
        if self.evaluation.is_correct:
            self.correct_count += 1
        self.state = PracticeState.CHECKED
        return self.evaluation

    def advance(self) -> PracticeState:
        """Move to the next question, or finish after the last one"""
        if self.state != PracticeState.CHECKED:
            raise SessionStateError("Check the current answer before moving on")

        if self.current_index < self.question_count - 1:
            self.current_index += 1
            self.current_answer = None
            self.evaluation = None
            self.state = PracticeState.ANSWERING
        else:
            self.state = PracticeState.FINISHED
            logger.info(f"Practice finished: {self.correct_count}/{self.question_count} correct")
        return self.state
