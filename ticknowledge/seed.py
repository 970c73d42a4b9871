"""Fill the database with a small set of sample data."""

import argparse
import logging
import uuid

from sqlalchemy.exc import SQLAlchemyError

from . import config as config_module
from .db import connect
from .models import (
    ChatMessage,
    ChatSession,
    FeedbackType,
    Feedback,
    FieldType,
    KnowledgeEntry,
    MessageRole,
    Template,
    TemplateField,
    User,
    UserRole,
)

logger = logging.getLogger(__name__)

_USERS = [
    ("admin@example.com", "System Administrator", UserRole.ADMIN),
    ("support@example.com", "Support Manager", UserRole.SUPPORT),
    ("editor@example.com", "Content Editor", UserRole.EDITOR),
    ("user@example.com", "Regular User", UserRole.USER),
]

# name, description, category, index of the creating user
_TEMPLATES = [
    (
        "Error Resolution Guide",
        "Template for documenting how to resolve common errors",
        "troubleshooting",
        0,
    ),
    (
        "Feature Documentation",
        "Template for documenting application features",
        "documentation",
        1,
    ),
    ("Process Guide", "Template for documenting business processes", "process", 2),
]

_FIELDS = [
    dict(
        template=0,
        name="error_code",
        type=FieldType.TEXT,
        label="Error Code",
        description="The specific error code or identifier",
        required=True,
        order=1,
    ),
    dict(
        template=0,
        name="error_message",
        type=FieldType.TEXTAREA,
        label="Error Message",
        description="The exact error message shown to users",
        required=True,
        order=2,
    ),
    dict(
        template=0,
        name="solution_steps",
        type=FieldType.TEXTAREA,
        label="Solution Steps",
        description="Step-by-step instructions to resolve the error",
        required=True,
        order=3,
    ),
    dict(
        template=0,
        name="priority",
        type=FieldType.SELECT,
        label="Priority",
        description="The priority level of this error",
        required=True,
        options='["low", "medium", "high", "critical"]',
        order=4,
    ),
    dict(
        template=1,
        name="feature_name",
        type=FieldType.TEXT,
        label="Feature Name",
        description="Name of the feature",
        required=True,
        order=1,
    ),
    dict(
        template=1,
        name="description",
        type=FieldType.TEXTAREA,
        label="Description",
        description="Detailed description of the feature",
        required=True,
        order=2,
    ),
    dict(
        template=1,
        name="how_to_access",
        type=FieldType.TEXTAREA,
        label="How to Access",
        description="Instructions on how to access this feature",
        required=True,
        order=3,
    ),
    dict(
        template=1,
        name="required_permissions",
        type=FieldType.TEXT,
        label="Required Permissions",
        description="What permissions are needed to use this feature",
        required=False,
        order=4,
    ),
]

_ENTRIES = [
    dict(
        title="Payment Processing Error PAY_001",
        content=(
            "This error occurs when the payment gateway connection fails. Follow these "
            "steps to resolve: 1. Check internet connectivity 2. Verify API keys are "
            "correct 3. Check payment gateway status page 4. Contact payment provider "
            "if issue persists"
        ),
        summary="How to resolve payment gateway connection failures",
        category="troubleshooting",
        tags='["payment", "error", "gateway", "PAY_001"]',
        template=0,
        field_data=(
            r'{"error_code": "PAY_001", "error_message": "Payment gateway connection '
            r'failed", "solution_steps": "1. Check internet connectivity\\n2. Verify API '
            r'keys\\n3. Check gateway status\\n4. Contact provider", "priority": "high"}'
        ),
        priority=5,
        creator=1,
    ),
    dict(
        title="How to Process Orders",
        content=(
            "To process orders in the system: 1. Navigate to Orders > Pending Orders "
            "2. Click on an order to view details 3. Verify customer information and "
            "items 4. Update order status to 'Processing' 5. Generate shipping label "
            "6. Update status to 'Shipped' when dispatched"
        ),
        summary="Step-by-step guide for processing customer orders",
        category="process",
        tags='["orders", "processing", "workflow", "shipping"]',
        template=None,
        field_data=None,
        priority=4,
        creator=2,
    ),
    dict(
        title="User Permission Management",
        content=(
            "The User Management feature allows administrators to control user access. "
            "To access: Admin Panel > Users > Manage Permissions. You can assign roles "
            "(Admin, Editor, User, Support) and specific permissions for each module."
        ),
        summary="How to manage user permissions and roles",
        category="documentation",
        tags='["users", "permissions", "roles", "admin"]',
        template=1,
        field_data=(
            '{"feature_name": "User Permission Management", "description": '
            '"Comprehensive user access control system", "how_to_access": "Admin Panel '
            '> Users > Manage Permissions", "required_permissions": "Admin role required"}'
        ),
        priority=3,
        creator=0,
    ),
    dict(
        title="Database Connection Error DB_502",
        content=(
            "This error indicates the application cannot connect to the database. "
            "Common causes: 1. Database server is down 2. Connection string is "
            "incorrect 3. Network connectivity issues 4. Database credentials expired. "
            "Solutions: Check database server status, verify connection parameters, "
            "test network connectivity, update credentials if needed."
        ),
        summary="Troubleshooting database connection failures",
        category="troubleshooting",
        tags='["database", "connection", "error", "DB_502"]',
        template=0,
        field_data=(
            r'{"error_code": "DB_502", "error_message": "Cannot connect to database '
            r'server", "solution_steps": "1. Check database server status\\n2. Verify '
            r'connection string\\n3. Test network connectivity\\n4. Update credentials '
            r'if expired", "priority": "critical"}'
        ),
        priority=5,
        creator=1,
    ),
    dict(
        title="How to Generate Reports",
        content=(
            "The reporting feature allows you to generate various business reports. "
            "Navigate to Reports > Report Builder. Select report type, date range, and "
            "filters. Click 'Generate Report' to create PDF or Excel output. Reports "
            "can be scheduled for automatic generation."
        ),
        summary="Guide to using the report generation feature",
        category="documentation",
        tags='["reports", "analytics", "export", "pdf", "excel"]',
        template=1,
        field_data=(
            '{"feature_name": "Report Generator", "description": "Create and schedule '
            'business reports", "how_to_access": "Reports > Report Builder", '
            '"required_permissions": "Editor role or higher"}'
        ),
        priority=2,
        creator=2,
    ),
    dict(
        title="Email Notification Setup",
        content=(
            "Configure email notifications for important events: 1. Go to Settings > "
            "Notifications 2. Enable email notifications 3. Configure SMTP settings "
            "4. Set up notification rules 5. Test email delivery. Ensure firewall "
            "allows SMTP traffic on port 587."
        ),
        summary="How to set up and configure email notifications",
        category="configuration",
        tags='["email", "notifications", "SMTP", "settings"]',
        template=None,
        field_data=None,
        priority=3,
        creator=0,
    ),
]

_SESSION_TITLES = ["Payment Error Help", "Order Processing Question"]

# index of the chat session, role, content, metadata
_MESSAGES = [
    (
        0,
        MessageRole.USER,
        "I'm getting a payment error PAY_001 when trying to process customer payments. "
        "What should I do?",
        None,
    ),
    (
        0,
        MessageRole.ASSISTANT,
        "The PAY_001 error indicates a payment gateway connection failure. Here's how to "
        "resolve it:\n\n1. Check your internet connectivity\n2. Verify that your API keys "
        "are correct\n3. Check the payment gateway status page\n4. Contact your payment "
        "provider if the issue persists\n\nThis is a high priority issue that should be "
        "addressed immediately to avoid disrupting customer transactions.",
        '{"sources": ["Payment Processing Error PAY_001"], "confidence": 0.95}',
    ),
    (
        1,
        MessageRole.USER,
        "How do I process orders in the system? I'm new to this role.",
        None,
    ),
    (
        1,
        MessageRole.ASSISTANT,
        "Welcome! Here's the step-by-step process for handling orders:\n\n1. Navigate to "
        "Orders > Pending Orders\n2. Click on an order to view its details\n3. Verify "
        "customer information and items\n4. Update the order status to 'Processing'\n5. "
        "Generate a shipping label\n6. Update status to 'Shipped' when the order is "
        "dispatched\n\nThis workflow ensures all orders are properly tracked and customers "
        "receive timely updates.",
        '{"sources": ["How to Process Orders"], "confidence": 0.92}',
    ),
]

# index of the message, rating, comment, resolved
_FEEDBACK = [
    (1, 5, "Very helpful! The steps were clear and resolved the issue quickly.", True),
    (3, 4, "Good explanation, but could use screenshots for visual learners.", False),
]


def _add(session, records, label):
    session.add_all(records)
    session.flush()
    logger.info("Created %d %s", len(records), label)
    return records


def create_mock_data(session):
    """Insert sample users, templates, knowledge entries, chats and feedback.

    Everything is committed together; on a database error nothing is kept and
    the error is raised. Returns how many records of each kind were created.
    """
    try:
        users = _add(
            session,
            [
                User(id=uuid.uuid4(), email=email, name=name, role=role, is_active=True)
                for email, name, role in _USERS
            ],
            "users",
        )

        templates = _add(
            session,
            [
                Template(
                    id=uuid.uuid4(),
                    name=name,
                    description=description,
                    category=category,
                    is_active=True,
                    created_by=users[creator].id,
                )
                for name, description, category, creator in _TEMPLATES
            ],
            "templates",
        )

        fields = _add(
            session,
            [
                TemplateField(
                    id=uuid.uuid4(),
                    template_id=templates[spec["template"]].id,
                    name=spec["name"],
                    type=spec["type"],
                    label=spec["label"],
                    description=spec["description"],
                    required=spec["required"],
                    options=spec.get("options", ""),
                    order=spec["order"],
                )
                for spec in _FIELDS
            ],
            "template fields",
        )

        entries = _add(
            session,
            [
                KnowledgeEntry(
                    id=uuid.uuid4(),
                    title=spec["title"],
                    content=spec["content"],
                    summary=spec["summary"],
                    category=spec["category"],
                    tags=spec["tags"],
                    template_id=(
                        templates[spec["template"]].id if spec["template"] is not None else None
                    ),
                    field_data=spec["field_data"],
                    is_published=True,
                    priority=spec["priority"],
                    created_by=users[spec["creator"]].id,
                )
                for spec in _ENTRIES
            ],
            "knowledge entries",
        )

        regular_user = users[3]
        chat_sessions = _add(
            session,
            [
                ChatSession(id=uuid.uuid4(), user_id=regular_user.id, title=title, is_active=True)
                for title in _SESSION_TITLES
            ],
            "chat sessions",
        )

        messages = _add(
            session,
            [
                ChatMessage(
                    id=uuid.uuid4(),
                    session_id=chat_sessions[index].id,
                    role=role,
                    content=content,
                    metadata_=metadata,
                )
                for index, role, content, metadata in _MESSAGES
            ],
            "chat messages",
        )

        feedbacks = _add(
            session,
            [
                Feedback(
                    id=uuid.uuid4(),
                    message_id=messages[index].id,
                    user_id=regular_user.id,
                    rating=rating,
                    comment=comment,
                    type=FeedbackType.HELPFUL,
                    is_resolved=resolved,
                )
                for index, rating, comment, resolved in _FEEDBACK
            ],
            "feedback entries",
        )

        session.commit()
    except SQLAlchemyError:
        session.rollback()
        raise

    return {
        "users": len(users),
        "templates": len(templates),
        "template_fields": len(fields),
        "knowledge_entries": len(entries),
        "chat_sessions": len(chat_sessions),
        "chat_messages": len(messages),
        "feedback": len(feedbacks),
    }


def main(argv=None):
    """Load settings, connect to the database and insert the sample data."""
    parser = argparse.ArgumentParser(
        prog="ticknowledge-seed", description="Populate the database with sample data."
    )
    parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")

    cfg = config_module.load()
    try:
        session_factory = connect(cfg.database_url)
    except (ValueError, SQLAlchemyError) as exc:
        logger.error("Failed to connect to database: %s", exc)
        return 1

    logger.info("Starting to populate database with mock data...")
    try:
        with session_factory() as session:
            create_mock_data(session)
    except SQLAlchemyError as exc:
        logger.error("Failed to create mock data: %s", exc)
        return 1

    logger.info("Successfully populated database with mock data!")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())