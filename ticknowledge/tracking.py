"""Question statistics and chat request logging."""

import enum
import json
from datetime import datetime

from sqlalchemy import select

from .models import TimeDistributionStat, TopicQuestionStat, TrackedChatLog


class TimeSlot(enum.Enum):
    """Part of the day a question was asked in, with its topic id and label."""

    MORNING = (1, "Morning (6AM - 12PM)")
    AFTERNOON = (2, "Afternoon (12PM - 6PM)")
    EVENING = (3, "Evening (6PM - 12AM)")
    NIGHT = (4, "Night (12AM - 6AM)")

    def __init__(self, topic_id, time_range):
        self.topic_id = topic_id
        self.time_range = time_range


def time_slot(hour):
    """Return the TimeSlot an hour of the day (0-23) falls into."""
    if not 0 <= hour < 24:
        raise ValueError(f"hour out of range: {hour}")
    if 6 <= hour < 12:
        return TimeSlot.MORNING
    if 12 <= hour < 18:
        return TimeSlot.AFTERNOON
    if 18 <= hour < 24:
        return TimeSlot.EVENING
    return TimeSlot.NIGHT


def _first(session, model, condition):
    return session.scalars(select(model).where(condition).order_by(model.id).limit(1)).first()


def record_question(session, now=None):
    """Count one question against the topic and time-range statistics.

    Returns the TimeSlot the question was counted under.
    """
    if now is None:
        now = datetime.now()
    slot = time_slot(now.hour)

    topic_stat = _first(session, TopicQuestionStat, TopicQuestionStat.topic_id == slot.topic_id)
    if topic_stat is None:
        session.add(TopicQuestionStat(topic_id=slot.topic_id, count=1))
    else:
        topic_stat.count += 1

    time_stat = _first(
        session, TimeDistributionStat, TimeDistributionStat.time_range == slot.time_range
    )
    if time_stat is None:
        session.add(TimeDistributionStat(time_range=slot.time_range, count=1))
    else:
        time_stat.count += 1

    session.commit()
    return slot


def log_tracked_chat(session, api_name, request_msg, response_value, response_time_ms):
    """Store one chat request with its response and how long it took.

    A response that is not already a string is stored as JSON.
    """
    if not isinstance(response_value, str):
        response_value = json.dumps(response_value, default=str)
    record = TrackedChatLog(
        api_name=api_name,
        request_msg=request_msg,
        response_value=response_value,
        response_time=int(response_time_ms),
    )
    session.add(record)
    session.commit()
    return record