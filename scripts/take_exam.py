import getpass
import sys
import time
from pathlib import Path

# Add parent directory to path
sys.path.append(str(Path(__file__).parent.parent))

from config.settings import LOG_LEVEL
from data.loader import MaterialLoader
from evaluation.answer_evaluator import AnswerEvaluator
from evaluation.reporting import format_duration, format_user_answer, summarize
from generation.gateway import AIGateway
from generation.question_generator import QuestionGenerator, estimate_generation_seconds
from models.errors import StudyAppError
from models.schemas import (
    Difficulty,
    ExamConfig,
    ExamType,
    PracticeConfig,
    QuestionType,
    TimeIntensity,
)
from session.controller import StudyController
from session.exam_session import ExamState
from session.practice_session import PracticeState
from storage.history import HistoryStore
import logging

def configure_logging(level=LOG_LEVEL):
    # The imported modules already configured the root logger at INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        force=True,
    )


configure_logging()
logger = logging.getLogger(__name__)


def read_answer(session, index):
    """Prompt for an answer in the shape the question type needs; None means a command was entered"""
    question = session.questions[index]
    print(f"\n[{question.type.value}] {question.text}")

    if question.type == QuestionType.MULTIPLE_CHOICE:
        for i, option in enumerate(question.options, 1):
            print(f"  {i}. {option}")
        raw = input("Answer (number): ").strip()
        if raw.isdigit() and 1 <= int(raw) <= len(question.options):
            return question.options[int(raw) - 1]
        return raw

    if question.type == QuestionType.TRUE_FALSE:
        raw = input("True or False (t/f): ").strip().lower()
        return {"t": "True", "f": "False"}.get(raw, raw)

    if question.type == QuestionType.FILL_IN_THE_BLANK:
        count = max(question.blank_count, len(question.correct_answers))
        return [input(f"  Blank {i}: ").strip() for i in range(1, count + 1)]

    if question.type == QuestionType.MATCHING:
        choices = session.matching_choices(index)
        for i, choice in enumerate(choices, 1):
            print(f"  {i}. {choice}")
        matches = {}
        for pair in question.matching_pairs:
            raw = input(f"  {pair.prompt} -> ").strip()
            if raw.isdigit() and 1 <= int(raw) <= len(choices):
                matches[pair.prompt] = choices[int(raw) - 1]
            elif raw:
                matches[pair.prompt] = raw
        return matches

    return input("Your answer: ").strip()


class ExamClock:
    """Feeds wall-clock time spent at the prompt into the exam countdown"""

    def __init__(self, session, clock=time.monotonic):
        self.session = session
        self.clock = clock
        self.last_tick = clock()

    def sync(self) -> bool:
        """Apply whole seconds elapsed since the last sync; False once time has run out"""
        elapsed = int(self.clock() - self.last_tick)
        if elapsed:
            self.last_tick += elapsed
            self.session.tick(elapsed)
        if self.session.state != ExamState.ACTIVE:
            print("\nTime is up!")
            return False
        return True


def run_exam(session, clock=None):
    timer = ExamClock(session, clock or time.monotonic)
    print(f"\nExam started: {session.question_count} questions, {format_duration(session.total_time)} on the clock")
    print("Commands: :n next, :p previous, :s submit (Enter keeps the current answer)")

    while session.state == ExamState.ACTIVE:
        index = session.current_index
        print(f"\n--- Question {index + 1}/{session.question_count} | time left {format_duration(session.time_left)} ---")
        command = input("Press Enter to answer or type a command: ").strip()
        if not timer.sync():
            break

        if command == ":n":
            session.next()
        elif command == ":p":
            session.previous()
        elif command == ":s":
            session.submit()
        else:
            value = read_answer(session, index)
            if not timer.sync():
                break
            session.answer_current(value)
            if session.is_last_question:
                confirm = input("Submit exam now? (y/n): ").strip().lower()
                if not timer.sync():
                    break
                if confirm == "y":
                    session.submit()
            else:
                session.next()

    return session.result


def print_result(result):
    summary = summarize(result)
    print("\n" + "=" * 80)
    print(f"{summary['exam_type']} Exam - {summary['date']}")
    print(f"Score: {summary['total_score']:.0f}/{summary['max_score']} ({summary['accuracy']:.0f}%)"
          f" - {'PASSED' if summary['passed'] else 'NEEDS WORK'}")
    print(f"Time taken: {summary['time_taken']}")
    print("\nTopic performance:")
    for topic, performance in summary["topic_performance"].items():
        print(f"  - {topic}: {performance:.0f}%")
    print("\nReview:")
    for i, (question, answer, evaluation) in enumerate(
        zip(result.questions, result.user_answers, result.evaluations), 1
    ):
        mark = "✓" if evaluation.is_correct else "✗"
        print(f"{i}. {mark} {question.text}")
        print(f"   Your answer: {format_user_answer(answer)}")
        print(f"   {evaluation.score:.0f}/10 - {evaluation.feedback}")
        for criterion in evaluation.criteria or []:
            print(f"     {criterion.criterion}: {criterion.score:.0f}/10. {criterion.feedback}")
    print("=" * 80)


def run_practice(session):
    while session.state != PracticeState.FINISHED:
        index = session.current_index
        print(f"\n--- Practice {index + 1}/{session.question_count} ---")
        session.answer(read_answer(session, index))
        evaluation = session.check()
        print(f"{'✓' if evaluation.is_correct else '✗'} {evaluation.feedback}")
        input("Press Enter to continue...")
        session.advance()

    correct, total = session.score
    print(f"\nPractice complete! You got {correct} out of {total} correct.")


def main(args):
    loader = MaterialLoader()
    materials = loader.load_all(args.materials)

    gateway = AIGateway()
    controller = StudyController(
        user=getpass.getuser(),
        generator=QuestionGenerator(gateway),
        evaluator=AnswerEvaluator(gateway),
        history=HistoryStore(),
    )
    controller.load_history()

    if args.mode == "exam":
        config = ExamConfig(
            type=ExamType(args.type),
            difficulty=Difficulty(args.difficulty),
            intensity=TimeIntensity(args.intensity),
            num_questions=args.num_questions,
        )
        logger.info(f"Generating exam (about {estimate_generation_seconds(config)}s)...")
        session = controller.start_exam(config, materials)
        result = run_exam(session)
        if result:
            print_result(result)
        return True

    topics = args.topics or controller.extract_topics(materials)
    if not args.topics:
        print("Extracted topics: " + ", ".join(topics))
    config = PracticeConfig(
        topics=topics,
        question_types=[QuestionType(t) for t in args.question_types],
        difficulty=Difficulty(args.difficulty),
        num_questions=args.num_questions,
    )
    logger.info(f"Generating practice quiz (about {estimate_generation_seconds(config)}s)...")
    run_practice(controller.start_practice(config, materials))
    return True


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Take an AI-generated exam or practice quiz on your course materials")
    parser.add_argument("materials", nargs="+", help="PDF or text files with course material")
    parser.add_argument("--mode", choices=["exam", "practice"], default="exam")
    parser.add_argument("--type", choices=[t.value for t in ExamType], default=ExamType.MIXED.value)
    parser.add_argument("--difficulty", choices=[d.value for d in Difficulty], default=Difficulty.INTERMEDIATE.value)
    parser.add_argument("--intensity", choices=[i.value for i in TimeIntensity], default=TimeIntensity.MODERATE.value)
    parser.add_argument("--num-questions", type=int, default=None)
    parser.add_argument("--topics", nargs="*", help="Practice topics (extracted from the materials if omitted)")
    parser.add_argument(
        "--question-types", nargs="+", choices=[t.value for t in QuestionType],
        default=[QuestionType.MULTIPLE_CHOICE.value], help="Practice question types",
    )
    args = parser.parse_args()
    if args.num_questions is None:
        args.num_questions = 10 if args.mode == "exam" else 5

    try:
        success = main(args)
    except StudyAppError as e:
        logger.error(str(e))
        success = False

    if not success:
        sys.exit(1)
