import json
import sys
from pathlib import Path

import pytest

# Add the repository root to sys.path so the top-level packages import
ROOT_PATH = Path(__file__).resolve().parent.parent
if ROOT_PATH.as_posix() not in sys.path:
    sys.path.insert(0, ROOT_PATH.as_posix())

from models.errors import GatewayError  # noqa: E402
from models.schemas import MatchingPair, Question, QuestionType  # noqa: E402


class FakeGateway:
    """Stands in for AIGateway: records prompts and replays canned responses"""

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.calls = []

    def generate(self, prompt, response_model, system=None, temperature=None):
        self.calls.append({"prompt": prompt, "response_model": response_model, "system": system})
        if not self.responses:
            raise AssertionError("FakeGateway called more times than expected")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        if isinstance(response, (dict, list)):
            return json.dumps(response)
        return response


@pytest.fixture
def fake_gateway():
    return FakeGateway()


@pytest.fixture
def mc_question():
    return Question(
        question="What is the capital of France?",
        type=QuestionType.MULTIPLE_CHOICE,
        topic="Geography",
        options=["Paris", "Lyon", "Nice", "Lille"],
        correctAnswer="Paris",
    )


@pytest.fixture
def tf_question():
    return Question(
        question="The sun is a star.",
        type=QuestionType.TRUE_FALSE,
        topic="Astronomy",
        correctAnswer="True",
    )


@pytest.fixture
def fib_question():
    return Question(
        question="The ___ rises in the east and the ___ reflects its light.",
        type=QuestionType.FILL_IN_THE_BLANK,
        topic="Astronomy",
        correctAnswers=["sun", "moon"],
    )


@pytest.fixture
def matching_question():
    return Question(
        question="Match the letters to the numbers.",
        type=QuestionType.MATCHING,
        topic="Basics",
        matchingPairs=[MatchingPair(prompt="A", answer="1"), MatchingPair(prompt="B", answer="2")],
    )


@pytest.fixture
def essay_question():
    return Question(
        question="Discuss the causes of the French Revolution.",
        type=QuestionType.ESSAY,
        topic="History",
        correctAnswer="Fiscal crisis, Enlightenment ideas, social inequality.",
    )


@pytest.fixture
def short_answer_question():
    return Question(
        question="What does photosynthesis produce?",
        type=QuestionType.SHORT_ANSWER,
        topic="Biology",
        correctAnswer="Glucose and oxygen.",
    )


@pytest.fixture
def gateway_error():
    return GatewayError("All AI providers failed or were unavailable.")
