"""Answer evaluation: rule-based for objective questions, LLM-graded for written answers"""

import json
import logging
from typing import Optional

from pydantic import ValidationError

from config.settings import GRADING_TEMPERATURE, MAX_SCORE, SUBJECTIVE_PASS_SCORE
from generation.gateway import AIGateway, parse_json
from models.errors import GatewayError
from models.schemas import (
    BlanksAnswer,
    Evaluation,
    MatchesAnswer,
    Question,
    QuestionType,
    SubjectiveGrade,
    TextAnswer,
    UserAnswer,
    SUBJECTIVE_TYPES,
)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

NO_ANSWER_FEEDBACK = "No answer was provided."
CORRECT_FEEDBACK = "Correct!"
UNSUPPORTED_FEEDBACK = "This question type cannot be evaluated automatically."
FALLBACK_FEEDBACK = "Could not automatically perform a detailed evaluation for this answer."

GRADING_CRITERIA = ("Clarity", "Accuracy", "Completeness")


def normalize(text: str) -> str:
    return text.strip().casefold()


def is_unanswered(answer: Optional[UserAnswer]) -> bool:
    """None, an empty string, or blanks that are all empty"""
    if answer is None:
        return True
    if isinstance(answer, TextAnswer):
        return answer.value == ""
    if isinstance(answer, BlanksAnswer):
        return all(value == "" for value in answer.values)
    return False


def _result(question: Question, is_correct: bool, feedback: str) -> Evaluation:
    return Evaluation(
        score=MAX_SCORE if is_correct else 0,
        is_correct=is_correct,
        feedback=feedback,
        topic=question.topic,
    )


def evaluate_objective(question: Question, answer: Optional[UserAnswer]) -> Evaluation:
    """Score a multiple-choice, true/false, fill-in-the-blank or matching answer.

    All-or-nothing: the score is 10 when fully correct and 0 otherwise, even
    for matching where the number of correct pairs is reported.
    """
    qtype = question.type

    if qtype in (QuestionType.MULTIPLE_CHOICE, QuestionType.TRUE_FALSE):
        is_correct = (
            isinstance(answer, TextAnswer)
            and normalize(answer.value) == normalize(question.correct_answer or "")
        )
        feedback = CORRECT_FEEDBACK if is_correct else f"The correct answer is: {question.correct_answer}"
        return _result(question, is_correct, feedback)

    if qtype == QuestionType.FILL_IN_THE_BLANK:
        expected = question.correct_answers or []
        is_correct = (
            isinstance(answer, BlanksAnswer)
            and len(answer.values) == len(expected)
            and all(normalize(given) == normalize(correct) for given, correct in zip(answer.values, expected))
        )
        feedback = CORRECT_FEEDBACK if is_correct else f"The correct answers are: {', '.join(expected)}"
        return _result(question, is_correct, feedback)

    if qtype == QuestionType.MATCHING:
        pairs = question.matching_pairs or []
        matched = 0
        if isinstance(answer, MatchesAnswer):
            for pair in pairs:
                chosen = answer.matches.get(pair.prompt)
                if chosen and normalize(chosen) == normalize(pair.answer):
                    matched += 1
        is_correct = matched == len(pairs)
        return _result(question, is_correct, f"You got {matched} out of {len(pairs)} matches correct.")

    return _result(question, False, UNSUPPORTED_FEEDBACK)


def format_answer_for_prompt(answer: UserAnswer) -> str:
    if isinstance(answer, TextAnswer):
        return answer.value
    if isinstance(answer, BlanksAnswer):
        return ", ".join(answer.values)
    return "; ".join(f"{prompt}: {chosen}" for prompt, chosen in answer.matches.items())


class AnswerEvaluator:
    """Evaluates one answer at a time.

    Objective types are scored locally. Short-answer and essay answers go to
    the LLM; if that call fails or its response cannot be parsed the answer
    gets a zero-score fallback evaluation instead of an error.
    """

    def __init__(self, gateway: Optional[AIGateway] = None):
        self.gateway = gateway

    def evaluate(self, question: Question, answer: Optional[UserAnswer]) -> Evaluation:
        if is_unanswered(answer):
            return _result(question, False, NO_ANSWER_FEEDBACK)

        if question.is_objective:
            return evaluate_objective(question, answer)
        if question.type in SUBJECTIVE_TYPES:
            return self.evaluate_subjective(question, answer)
        return _result(question, False, UNSUPPORTED_FEEDBACK)

    def build_grading_prompt(self, question: Question, answer: UserAnswer) -> str:
        criteria = ", ".join(GRADING_CRITERIA)
        return f"""You are an expert AI grader. Evaluate a student's answer for a '{question.type.value}' question.

Question: {question.text}
Model Answer (for reference): {question.correct_answer}
Student's Answer: {format_answer_for_prompt(answer)}

TASK:
1. Provide a holistic score from 0 to 10.
2. Write concise, constructive overall feedback.
3. Provide a score breakdown based on the following criteria: {criteria}. Each criterion is scored out of 10.
4. Identify specific, brief quotes from the student's answer that represent "strengths".
5. Identify specific, brief quotes from the student's answer that represent "weaknesses". If there are none, return an empty array.

Respond STRICTLY in JSON matching the provided schema."""

    def evaluate_subjective(self, question: Question, answer: UserAnswer) -> Evaluation:
        if self.gateway is None:
            logger.error("No AI gateway configured for written-answer grading")
            return _result(question, False, FALLBACK_FEEDBACK)

        prompt = self.build_grading_prompt(question, answer)
        response_text = None
        try:
            response_text = self.gateway.generate(
                prompt, SubjectiveGrade, temperature=GRADING_TEMPERATURE
            )
            grade = SubjectiveGrade.model_validate(parse_json(response_text))
        except GatewayError as e:
            logger.error(f"Written-answer grading failed: {e}")
            return _result(question, False, FALLBACK_FEEDBACK)
        except (json.JSONDecodeError, ValidationError) as e:
            logger.error(f"Failed to parse detailed evaluation response: {response_text} ({e})")
            return _result(question, False, FALLBACK_FEEDBACK)

        return Evaluation(
            score=grade.score,
            is_correct=grade.score >= SUBJECTIVE_PASS_SCORE,
            feedback=grade.feedback,
            topic=question.topic,
            criteria=grade.criteria,
            strengths=grade.strengths,
            weaknesses=grade.weaknesses,
        )
