import math
from typing import Dict, Iterable, List

from studylens.domain.schemas.analytics import AnswerOutcome, AttemptScore, TopicStats

DEFAULT_TOPIC = "General"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def topic_performance(outcomes: Iterable[AnswerOutcome], limit: int = 5) -> List[TopicStats]:
    """
    Per-topic answer accuracy, most-practised topics first.
    Answers to questions without a topic category count towards "General".
    """
    tallies: Dict[str, List[int]] = {}
    for outcome in outcomes:
        topic = outcome.topic_category or DEFAULT_TOPIC
        tally = tallies.setdefault(topic, [0, 0])
        tally[1] += 1
        if outcome.is_correct:
            tally[0] += 1

    stats = [
        TopicStats(
            topic=topic,
            correct=correct,
            total=total,
            percentage=_round_half_up(correct / total * 100),
        )
        for topic, (correct, total) in tallies.items()
    ]
    stats.sort(key=lambda s: s.total, reverse=True)
    return stats[: max(0, limit)]


def average_score(attempts: Iterable[AttemptScore]) -> int:
    percentages = [
        (attempt.score or 0) / attempt.total_questions * 100
        for attempt in attempts
        if attempt.total_questions
    ]
    if not percentages:
        return 0
    return _round_half_up(sum(percentages) / len(percentages))
