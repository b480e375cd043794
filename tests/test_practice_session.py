import pytest
from conftest import FakeGateway

from evaluation.answer_evaluator import AnswerEvaluator
from models.errors import SessionStateError
from session.practice_session import PracticeSession, PracticeState


@pytest.fixture
def session(mc_question, tf_question, fib_question):
    return PracticeSession([mc_question, tf_question, fib_question], AnswerEvaluator(FakeGateway()))


def test_answer_check_advance_cycle(session):
    session.answer("Paris")
    evaluation = session.check()
    assert evaluation.is_correct
    assert session.state == PracticeState.CHECKED
    assert session.correct_count == 1

    assert session.advance() == PracticeState.ANSWERING
    assert session.current_index == 1
    assert session.current_answer is None
    assert session.evaluation is None


def test_full_quiz_reports_score(session):
    for answer in ["Paris", "False", ["sun", "moon"]]:
        session.answer(answer)
        session.check()
        session.advance()

    assert session.state == PracticeState.FINISHED
    assert session.score == (2, 3)


def test_unanswered_check_counts_as_wrong(session):
    evaluation = session.check()
    assert evaluation.feedback == "No answer was provided."
    assert session.correct_count == 0


def test_cannot_advance_before_check(session):
    session.answer("Paris")
    with pytest.raises(SessionStateError):
        session.advance()


def test_check_only_once_per_question(session):
    session.answer("Paris")
    session.check()
    with pytest.raises(SessionStateError):
        session.check()
    with pytest.raises(SessionStateError):
        session.answer("Lyon")
    assert session.correct_count == 1


def test_no_actions_after_finish(mc_question):
    session = PracticeSession([mc_question], AnswerEvaluator())
    session.answer("Paris")
    session.check()
    assert session.advance() == PracticeState.FINISHED
    with pytest.raises(SessionStateError):
        session.advance()
    with pytest.raises(SessionStateError):
        session.answer("Paris")
