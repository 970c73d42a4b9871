"""Summary data for the context dashboard."""

from datetime import datetime, timezone

from sqlalchemy import func, select

from .models import APICallLog, ContextFile, TimeDistributionStat, Topic, TopicQuestionStat


def _iso(value):
    return value.isoformat() if value is not None else None


def log_api_call(session, api_name):
    """Record that an API endpoint was called."""
    record = APICallLog(api_name=api_name, called_at=datetime.now(timezone.utc))
    session.add(record)
    session.commit()
    return record


def context_dashboard(session):
    """Build the dashboard summary; the call itself is logged first."""
    log_api_call(session, "GetContextDashboard")

    total_files = session.scalar(select(func.count()).select_from(ContextFile))
    total_topics = session.scalar(select(func.count()).select_from(Topic))

    first_topic = session.scalars(select(Topic).order_by(Topic.id).limit(1)).first()
    most_attractive = first_topic.name if first_topic is not None else ""

    topic_trends = []
    for stat in session.scalars(select(TopicQuestionStat).order_by(TopicQuestionStat.id)):
        topic = session.get(Topic, stat.topic_id) if stat.topic_id is not None else None
        topic_trends.append(
            {
                "name": topic.name if topic is not None else "",
                "count": stat.count,
                "percent": stat.percent,
            }
        )

    question_distribution = [
        {"time_range": stat.time_range, "count": stat.count, "percent": stat.percent}
        for stat in session.scalars(
            select(TimeDistributionStat).order_by(TimeDistributionStat.id)
        )
    ]

    context_files = [
        {
            "name": f.file_name,
            "labels": f.labels,
            "description": f.description,
            "updated": _iso(f.updated_at),
            "status": f.status,
        }
        for f in session.scalars(select(ContextFile).order_by(ContextFile.id))
    ]

    return {
        "total_files": total_files,
        "total_topics": total_topics,
        "most_attractive_topic": most_attractive,
        "topic_trends": topic_trends,
        "question_distribution": question_distribution,
        "context_files": context_files,
    }