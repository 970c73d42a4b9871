import pytest
from sqlalchemy import func, select

from ticknowledge.dashboard import context_dashboard, log_api_call
from ticknowledge.db import connect
from ticknowledge.models import (
    APICallLog,
    ContextFile,
    TimeDistributionStat,
    Topic,
    TopicQuestionStat,
)


@pytest.fixture
def session():
    factory = connect("sqlite://")
    with factory() as s:
        yield s


def _call_count(session):
    return session.scalar(select(func.count()).select_from(APICallLog))


def test_log_api_call_stores_name(session):
    record = log_api_call(session, "SomeEndpoint")
    assert session.get(APICallLog, record.id).api_name == "SomeEndpoint"
    assert record.called_at is not None


def test_empty_dashboard(session):
    result = context_dashboard(session)
    assert result == {
        "total_files": 0,
        "total_topics": 0,
        "most_attractive_topic": "",
        "topic_trends": [],
        "question_distribution": [],
        "context_files": [],
    }


def test_dashboard_logs_each_call(session):
    before = _call_count(session)
    context_dashboard(session)
    context_dashboard(session)
    assert _call_count(session) == before + 2
    names = set(session.scalars(select(APICallLog.api_name)))
    assert names == {"GetContextDashboard"}


def test_dashboard_contents(session):
    billing = Topic(name="Billing", description="money")
    shipping = Topic(name="Shipping")
    session.add_all([billing, shipping])
    session.flush()
    session.add_all(
        [
            TopicQuestionStat(topic_id=shipping.id, count=3, percent=30),
            TopicQuestionStat(topic_id=999, count=1, percent=10),
            TimeDistributionStat(time_range="Morning (6AM - 12PM)", count=5, percent=50),
            ContextFile(file_name="guide.pdf", labels="a,b", description="d", status="Active"),
        ]
    )
    session.commit()

    result = context_dashboard(session)
    assert result["total_files"] == 1
    assert result["total_topics"] == 2
    assert result["most_attractive_topic"] == "Billing"
    assert result["topic_trends"] == [
        {"name": "Shipping", "count": 3, "percent": 30},
        {"name": "", "count": 1, "percent": 10},
    ]
    assert result["question_distribution"] == [
        {"time_range": "Morning (6AM - 12PM)", "count": 5, "percent": 50}
    ]
    [file_entry] = result["context_files"]
    assert file_entry["name"] == "guide.pdf"
    assert file_entry["labels"] == "a,b"
    assert file_entry["status"] == "Active"
    assert isinstance(file_entry["updated"], str)