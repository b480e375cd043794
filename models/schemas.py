"""Pydantic models for data validation"""

import re
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "Multiple Choice"
    TRUE_FALSE = "True/False"
    FILL_IN_THE_BLANK = "Fill-in-the-Blank"
    MATCHING = "Matching"
    SHORT_ANSWER = "Short Answer"
    ESSAY = "Essay"


class ExamType(str, Enum):
    MIXED = "Mixed"
    MULTIPLE_CHOICE = "Multiple Choice"
    TRUE_FALSE = "True/False"
    FILL_IN_THE_BLANK = "Fill-in-the-Blank"
    MATCHING = "Matching"
    SHORT_ANSWER = "Short Answer"
    ESSAY = "Essay"


class Difficulty(str, Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


class TimeIntensity(str, Enum):
    RELAXED = "Relaxed"
    MODERATE = "Moderate"
    CHALLENGING = "Challenging"


# Seconds allowed per question in a timed exam
TIME_PER_QUESTION = {
    TimeIntensity.RELAXED: 180,
    TimeIntensity.MODERATE: 90,
    TimeIntensity.CHALLENGING: 45,
}

OBJECTIVE_TYPES = frozenset({
    QuestionType.MULTIPLE_CHOICE,
    QuestionType.TRUE_FALSE,
    QuestionType.FILL_IN_THE_BLANK,
    QuestionType.MATCHING,
})
SUBJECTIVE_TYPES = frozenset({QuestionType.SHORT_ANSWER, QuestionType.ESSAY})

# Types a "Mixed" exam draws from
MIXED_EXAM_TYPES = (
    QuestionType.MULTIPLE_CHOICE,
    QuestionType.TRUE_FALSE,
    QuestionType.FILL_IN_THE_BLANK,
    QuestionType.SHORT_ANSWER,
)

BLANK_MARKER = "___"
_BLANK_PATTERN = re.compile(r"_{3,}")


def per_question_seconds(intensity: TimeIntensity) -> int:
    return TIME_PER_QUESTION[TimeIntensity(intensity)]


class MatchingPair(BaseModel):
    """One prompt and the answer it should be matched with"""
    model_config = ConfigDict(frozen=True)

    prompt: str
    answer: str


# Which answer field each question type carries
_ANSWER_FIELD = {
    QuestionType.MULTIPLE_CHOICE: "correct_answer",
    QuestionType.TRUE_FALSE: "correct_answer",
    QuestionType.SHORT_ANSWER: "correct_answer",
    QuestionType.ESSAY: "correct_answer",
    QuestionType.FILL_IN_THE_BLANK: "correct_answers",
    QuestionType.MATCHING: "matching_pairs",
}

_ANSWER_KEYS = {
    "correct_answer": ("correctAnswer", "correct_answer"),
    "correct_answers": ("correctAnswers", "correct_answers"),
    "matching_pairs": ("matchingPairs", "matching_pairs"),
}


class Question(BaseModel):
    """A single assessment item.

    Field aliases follow the JSON the generator is asked to produce
    (``question``, ``correctAnswer``, ``correctAnswers``, ``matchingPairs``).
    Exactly one of the three answer fields is populated, and which one
    depends on ``type``.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    text: str = Field(alias="question", min_length=1)
    type: QuestionType
    topic: str = "General"
    options: Optional[List[str]] = None
    correct_answer: Optional[str] = Field(default=None, alias="correctAnswer")
    correct_answers: Optional[List[str]] = Field(default=None, alias="correctAnswers")
    matching_pairs: Optional[List[MatchingPair]] = Field(default=None, alias="matchingPairs")

    @model_validator(mode="before")
    @classmethod
    def drop_empty_fields(cls, data: Any) -> Any:
        """Generators often emit every field, filling the unused ones with null/""/[]"""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for keys in list(_ANSWER_KEYS.values()) + [("options",)]:
            for key in keys:
                if key in data and data[key] in (None, "", []):
                    del data[key]
        if "options" in data and data.get("type") != QuestionType.MULTIPLE_CHOICE:
            del data["options"]
        return data

    @model_validator(mode="after")
    def check_answer_fields(self) -> "Question":
        expected = _ANSWER_FIELD[self.type]
        populated = [name for name in _ANSWER_KEYS if getattr(self, name) is not None]
        if populated != [expected]:
            raise ValueError(
                f"{self.type.value} question must carry exactly '{expected}', got {populated or 'none'}"
            )
        if self.type == QuestionType.MULTIPLE_CHOICE and not self.options:
            raise ValueError("Multiple Choice question has no options")
        return self

    @property
    def blank_count(self) -> int:
        """Number of blank markers in the question text"""
        return len(_BLANK_PATTERN.findall(self.text))

    @property
    def is_objective(self) -> bool:
        return self.type in OBJECTIVE_TYPES


# --- User answers ---------------------------------------------------------

class TextAnswer(BaseModel):
    """Answer to a multiple-choice, true/false, short-answer or essay question"""
    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    value: str


class BlanksAnswer(BaseModel):
    """One entry per blank, in order; "" marks an unfilled blank"""
    model_config = ConfigDict(frozen=True)

    kind: Literal["blanks"] = "blanks"
    values: List[str]


class MatchesAnswer(BaseModel):
    """Chosen answer keyed by matching prompt"""
    model_config = ConfigDict(frozen=True)

    kind: Literal["matches"] = "matches"
    matches: Dict[str, str]


UserAnswer = Annotated[Union[TextAnswer, BlanksAnswer, MatchesAnswer], Field(discriminator="kind")]


def to_user_answer(raw) -> Optional[Union[TextAnswer, BlanksAnswer, MatchesAnswer]]:
    """Build the answer variant from a plain str / list / dict (None stays None)"""
    if raw is None or isinstance(raw, (TextAnswer, BlanksAnswer, MatchesAnswer)):
        return raw
    if isinstance(raw, str):
        return TextAnswer(value=raw)
    if isinstance(raw, (list, tuple)):
        return BlanksAnswer(values=[str(v) for v in raw])
    if isinstance(raw, dict):
        return MatchesAnswer(matches={str(k): str(v) for k, v in raw.items()})
    raise TypeError(f"Unsupported answer shape: {type(raw).__name__}")


# --- Evaluations ----------------------------------------------------------

class CriterionFeedback(BaseModel):
    model_config = ConfigDict(frozen=True)

    criterion: str
    score: float = Field(ge=0, le=10)
    feedback: str


class Evaluation(BaseModel):
    """Scored outcome for one question"""
    model_config = ConfigDict(frozen=True)

    score: float = Field(ge=0, le=10)
    is_correct: bool
    feedback: str
    topic: str
    # Only filled in for AI-graded answers
    criteria: Optional[List[CriterionFeedback]] = None
    strengths: Optional[List[str]] = None  # quotes from the user's answer
    weaknesses: Optional[List[str]] = None  # quotes from the user's answer


class SubjectiveGrade(BaseModel):
    """Response schema requested from the AI grader"""
    score: float = Field(ge=0, le=10)
    feedback: str
    criteria: List[CriterionFeedback] = Field(default_factory=list)
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)


# --- Configuration --------------------------------------------------------

class ExamConfig(BaseModel):
    """Configuration for a timed exam"""
    model_config = ConfigDict(frozen=True)

    type: ExamType = ExamType.MIXED
    difficulty: Difficulty = Difficulty.INTERMEDIATE
    intensity: TimeIntensity = TimeIntensity.MODERATE
    num_questions: int = Field(default=10, ge=1)


class PracticeConfig(BaseModel):
    """Configuration for an untimed practice quiz"""
    model_config = ConfigDict(frozen=True)

    topics: List[str] = Field(default_factory=list)
    question_types: List[QuestionType] = Field(default_factory=lambda: [QuestionType.MULTIPLE_CHOICE])
    difficulty: Difficulty = Difficulty.INTERMEDIATE
    num_questions: int = Field(default=5, ge=1)


class Material(BaseModel):
    """Extracted text of an uploaded course material"""
    name: str
    content: str
    mime_type: str = "text/plain"


# --- Results --------------------------------------------------------------

class ExamResult(BaseModel):
    """A finished exam as stored in history"""
    model_config = ConfigDict(frozen=True)

    questions: List[Question]
    user_answers: List[Optional[UserAnswer]]
    evaluations: List[Evaluation]
    time_taken: int = Field(ge=0)
    config: ExamConfig
    timestamp: datetime = Field(default_factory=datetime.now)

    @model_validator(mode="after")
    def check_parallel_lists(self) -> "ExamResult":
        if not (len(self.questions) == len(self.user_answers) == len(self.evaluations)):
            raise ValueError(
                f"questions/answers/evaluations differ in length: "
                f"{len(self.questions)}/{len(self.user_answers)}/{len(self.evaluations)}"
            )
        return self


# --- AI response envelopes ------------------------------------------------

class TopicsResponse(BaseModel):
    topics: List[str]


class QuestionsResponse(BaseModel):
    questions: List[Question]
