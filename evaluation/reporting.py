"""Score and per-topic aggregates for finished exams"""

from typing import Dict, List, Optional

import numpy as np

from config.settings import MAX_SCORE, PASSING_ACCURACY
from models.schemas import BlanksAnswer, Evaluation, ExamResult, MatchesAnswer, TextAnswer, UserAnswer


def total_score(evaluations: List[Evaluation]) -> float:
    return float(np.sum([e.score for e in evaluations])) if evaluations else 0.0


def accuracy(evaluations: List[Evaluation]) -> float:
    """Percentage of the maximum possible score (0 when there is nothing to score)"""
    if not evaluations:
        return 0.0
    return float(np.mean([e.score for e in evaluations]) / MAX_SCORE * 100)


def topic_performance(evaluations: List[Evaluation]) -> Dict[str, float]:
    """Percentage score per topic, in the order topics first appear"""
    scores: Dict[str, List[float]] = {}
    for evaluation in evaluations:
        scores.setdefault(evaluation.topic, []).append(evaluation.score)
    return {topic: float(np.mean(values) / MAX_SCORE * 100) for topic, values in scores.items()}


def is_passing(result: ExamResult) -> bool:
    return accuracy(result.evaluations) >= PASSING_ACCURACY


def format_user_answer(answer: Optional[UserAnswer]) -> str:
    if answer is None:
        return "No answer"
    if isinstance(answer, TextAnswer):
        return answer.value
    if isinstance(answer, BlanksAnswer):
        return ", ".join(answer.values)
    if isinstance(answer, MatchesAnswer):
        return "; ".join(f"{prompt}: {chosen}" for prompt, chosen in answer.matches.items())
    return "N/A"


def format_duration(seconds: int) -> str:
    minutes, seconds = divmod(int(seconds), 60)
    return f"{minutes:02d}:{seconds:02d}"


def summarize(result: ExamResult) -> dict:
    """Summary shown on the results screen and in the history list"""
    evaluations = result.evaluations
    return {
        "exam_type": result.config.type.value,
        "date": result.timestamp.strftime("%B %d, %Y"),
        "total_score": total_score(evaluations),
        "max_score": len(evaluations) * MAX_SCORE,
        "accuracy": accuracy(evaluations),
        "correct": sum(1 for e in evaluations if e.is_correct),
        "questions": len(evaluations),
        "time_taken": format_duration(result.time_taken),
        "passed": is_passing(result),
        "topic_performance": topic_performance(evaluations),
    }
