from studylens.domain.study.aggregation import aggregate_by_topic, sort_topic_groups
from studylens.domain.study.filtering import (
    StudyFilter,
    all_topics,
    filter_records,
    filter_topic_groups,
    group_matches,
    record_matches,
    restrict_to_content,
    toggle_topic,
)

__all__ = [
    "StudyFilter",
    "aggregate_by_topic",
    "all_topics",
    "filter_records",
    "filter_topic_groups",
    "group_matches",
    "record_matches",
    "restrict_to_content",
    "sort_topic_groups",
    "toggle_topic",
]
