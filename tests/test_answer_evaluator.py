from conftest import FakeGateway

from evaluation.answer_evaluator import FALLBACK_FEEDBACK, AnswerEvaluator
from models.errors import GatewayError
from models.schemas import SubjectiveGrade, TextAnswer

GRADE = {
    "score": 8,
    "feedback": "Solid answer.",
    "criteria": [
        {"criterion": "Clarity", "score": 9, "feedback": "Clear."},
        {"criterion": "Accuracy", "score": 8, "feedback": "Mostly right."},
        {"criterion": "Completeness", "score": 7, "feedback": "Misses one cause."},
    ],
    "strengths": ["fiscal crisis"],
    "weaknesses": [],
}


def test_essay_graded_by_gateway(essay_question):
    gateway = FakeGateway([GRADE])
    evaluation = AnswerEvaluator(gateway).evaluate(essay_question, TextAnswer(value="The fiscal crisis..."))

    assert evaluation.score == 8
    assert evaluation.is_correct
    assert evaluation.feedback == "Solid answer."
    assert evaluation.topic == "History"
    assert [c.criterion for c in evaluation.criteria] == ["Clarity", "Accuracy", "Completeness"]
    assert evaluation.strengths == ["fiscal crisis"]
    assert evaluation.weaknesses == []

    call = gateway.calls[0]
    assert call["response_model"] is SubjectiveGrade
    assert essay_question.text in call["prompt"]
    assert essay_question.correct_answer in call["prompt"]
    assert "The fiscal crisis..." in call["prompt"]


def test_pass_threshold_is_seven(short_answer_question):
    answer = TextAnswer(value="Sugar")
    at_threshold = AnswerEvaluator(FakeGateway([dict(GRADE, score=7)])).evaluate(short_answer_question, answer)
    below = AnswerEvaluator(FakeGateway([dict(GRADE, score=6.5)])).evaluate(short_answer_question, answer)
    assert at_threshold.is_correct
    assert not below.is_correct
    assert below.score == 6.5


def test_model_supplied_is_correct_is_ignored(short_answer_question):
    gateway = FakeGateway([dict(GRADE, score=3, isCorrect=True)])
    evaluation = AnswerEvaluator(gateway).evaluate(short_answer_question, TextAnswer(value="Sugar"))
    assert not evaluation.is_correct


def test_fenced_json_is_accepted(short_answer_question):
    import json

    gateway = FakeGateway(["```json\n" + json.dumps(GRADE) + "\n```"])
    evaluation = AnswerEvaluator(gateway).evaluate(short_answer_question, TextAnswer(value="Glucose"))
    assert evaluation.score == 8


def test_unparseable_response_falls_back(essay_question):
    gateway = FakeGateway(["this is not json"])
    evaluation = AnswerEvaluator(gateway).evaluate(essay_question, TextAnswer(value="An answer"))
    assert evaluation.score == 0
    assert not evaluation.is_correct
    assert evaluation.feedback == FALLBACK_FEEDBACK
    assert evaluation.topic == "History"
    assert evaluation.criteria is None


def test_out_of_range_score_falls_back(essay_question):
    gateway = FakeGateway([dict(GRADE, score=15)])
    evaluation = AnswerEvaluator(gateway).evaluate(essay_question, TextAnswer(value="An answer"))
    assert evaluation.feedback == FALLBACK_FEEDBACK


def test_gateway_failure_falls_back(essay_question):
    gateway = FakeGateway([GatewayError("All AI providers failed or were unavailable.")])
    evaluation = AnswerEvaluator(gateway).evaluate(essay_question, TextAnswer(value="An answer"))
    assert evaluation.score == 0
    assert evaluation.feedback == FALLBACK_FEEDBACK


def test_missing_gateway_falls_back(essay_question):
    evaluation = AnswerEvaluator(None).evaluate(essay_question, TextAnswer(value="An answer"))
    assert evaluation.feedback == FALLBACK_FEEDBACK
