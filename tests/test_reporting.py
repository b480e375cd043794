import pytest

from evaluation.reporting import (
    accuracy,
    format_duration,
    format_user_answer,
    is_passing,
    summarize,
    topic_performance,
    total_score,
)
from models.schemas import Evaluation, ExamConfig, ExamResult, to_user_answer


def ev(score, topic, correct=None):
    return Evaluation(score=score, is_correct=score == 10 if correct is None else correct, feedback="", topic=topic)


def make_result(questions, evaluations):
    return ExamResult(
        questions=questions[: len(evaluations)],
        user_answers=[None] * len(evaluations),
        evaluations=evaluations,
        time_taken=125,
        config=ExamConfig(),
    )


def test_totals_and_accuracy():
    evaluations = [ev(10, "A"), ev(0, "A"), ev(8, "B", correct=True)]
    assert total_score(evaluations) == 18
    assert accuracy(evaluations) == pytest.approx(60.0)
    assert accuracy([]) == 0.0
    assert total_score([]) == 0.0


def test_topic_performance_in_first_seen_order():
    performance = topic_performance([ev(10, "B"), ev(0, "A"), ev(5, "B", correct=False)])
    assert list(performance) == ["B", "A"]
    assert performance["B"] == pytest.approx(75.0)
    assert performance["A"] == 0.0


def test_passing_threshold(mc_question, tf_question, fib_question):
    questions = [mc_question, tf_question, fib_question]
    assert is_passing(make_result(questions, [ev(10, "A"), ev(7, "A", correct=True)]))
    assert not is_passing(make_result(questions, [ev(10, "A"), ev(0, "A"), ev(10, "A")]))


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, "No answer"),
        ("Paris", "Paris"),
        (["sun", "moon"], "sun, moon"),
        ({"A": "1", "B": "2"}, "A: 1; B: 2"),
    ],
)
def test_format_user_answer(raw, expected):
    assert format_user_answer(to_user_answer(raw)) == expected


def test_format_duration():
    assert format_duration(125) == "02:05"
    assert format_duration(0) == "00:00"


def test_summarize(mc_question, tf_question):
    summary = summarize(make_result([mc_question, tf_question], [ev(10, "Geo"), ev(0, "Astro")]))
    assert summary["exam_type"] == "Mixed"
    assert summary["max_score"] == 20
    assert summary["accuracy"] == pytest.approx(50.0)
    assert summary["correct"] == 1
    assert summary["time_taken"] == "02:05"
    assert summary["passed"] is False
    assert summary["topic_performance"] == {"Geo": 100.0, "Astro": 0.0}
