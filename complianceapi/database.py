import sqlite3

import databases
import sqlalchemy
from complianceapi.config import config

metadata = sqlalchemy.MetaData()


user_table = sqlalchemy.Table(
    "users",
    metadata,
    sqlalchemy.Column("id", sqlalchemy.Integer, primary_key=True),
    sqlalchemy.Column("email", sqlalchemy.String(255), unique=True, nullable=False),
    sqlalchemy.Column("password_hash", sqlalchemy.String(255), nullable=False),
    sqlalchemy.Column("first_name", sqlalchemy.String(128), nullable=False),
    sqlalchemy.Column("last_name", sqlalchemy.String(128), nullable=False),
    sqlalchemy.Column("role", sqlalchemy.String(32), nullable=False),  # admin, standard_user
    sqlalchemy.Column("is_active", sqlalchemy.Boolean, nullable=False, default=True),
    sqlalchemy.Column("created_at", sqlalchemy.DateTime, nullable=False),
    sqlalchemy.Column("updated_at", sqlalchemy.DateTime, nullable=False),
)

form_table = sqlalchemy.Table(
    "forms",
    metadata,
    sqlalchemy.Column("id", sqlalchemy.Integer, primary_key=True),
    sqlalchemy.Column("title", sqlalchemy.String(256), nullable=False),
    sqlalchemy.Column("description", sqlalchemy.Text, nullable=True),
    sqlalchemy.Column("tags", sqlalchemy.Text, nullable=True),  # JSON array string
    sqlalchemy.Column("is_active", sqlalchemy.Boolean, nullable=False, default=True),
    sqlalchemy.Column("created_by", sqlalchemy.ForeignKey("users.id"), nullable=False),
    sqlalchemy.Column("created_at", sqlalchemy.DateTime, nullable=False),
    sqlalchemy.Column("updated_at", sqlalchemy.DateTime, nullable=False),
)

formfield_table = sqlalchemy.Table(
    "form_fields",
    metadata,
    sqlalchemy.Column("id", sqlalchemy.Integer, primary_key=True),
    sqlalchemy.Column("form_id", sqlalchemy.ForeignKey("forms.id"), nullable=False),
    sqlalchemy.Column("field_type", sqlalchemy.String(32), nullable=False),
    sqlalchemy.Column("field_label", sqlalchemy.String(256), nullable=False),
    sqlalchemy.Column("field_key", sqlalchemy.String(128), nullable=False),
    sqlalchemy.Column("is_required", sqlalchemy.Boolean, nullable=False, default=False),
    sqlalchemy.Column("field_options", sqlalchemy.Text, nullable=True),  # JSON array string
    sqlalchemy.Column("field_order", sqlalchemy.Integer, nullable=False),
    sqlalchemy.Column("created_at", sqlalchemy.DateTime, nullable=False),
)

task_table = sqlalchemy.Table(
    "tasks",
    metadata,
    sqlalchemy.Column("id", sqlalchemy.Integer, primary_key=True),
    sqlalchemy.Column("form_id", sqlalchemy.ForeignKey("forms.id"), nullable=False),
    sqlalchemy.Column("assigned_to", sqlalchemy.ForeignKey("users.id"), nullable=False),
    sqlalchemy.Column("assigned_by", sqlalchemy.ForeignKey("users.id"), nullable=False),
    sqlalchemy.Column("title", sqlalchemy.String(256), nullable=False),
    sqlalchemy.Column("due_date", sqlalchemy.DateTime, nullable=False),
    sqlalchemy.Column("status", sqlalchemy.String(16), nullable=False, default="pending"),
    sqlalchemy.Column("recurrence_type", sqlalchemy.String(16), nullable=False, default="none"),
    sqlalchemy.Column("recurrence_interval", sqlalchemy.Integer, nullable=True),
    sqlalchemy.Column("next_due_date", sqlalchemy.DateTime, nullable=True),
    # the completed task this one was spawned from; unique so a task chains at most once
    sqlalchemy.Column("parent_task_id", sqlalchemy.ForeignKey("tasks.id"), nullable=True, unique=True),
    sqlalchemy.Column("created_at", sqlalchemy.DateTime, nullable=False),
    sqlalchemy.Column("updated_at", sqlalchemy.DateTime, nullable=False),
)

submission_table = sqlalchemy.Table(
    "form_submissions",
    metadata,
    sqlalchemy.Column("id", sqlalchemy.Integer, primary_key=True),
    sqlalchemy.Column("form_id", sqlalchemy.ForeignKey("forms.id"), nullable=False),
    sqlalchemy.Column("task_id", sqlalchemy.ForeignKey("tasks.id"), nullable=True),
    sqlalchemy.Column("submitted_by", sqlalchemy.ForeignKey("users.id"), nullable=False),
    sqlalchemy.Column("submission_data", sqlalchemy.Text, nullable=False),  # JSON object string
    sqlalchemy.Column("submitted_at", sqlalchemy.DateTime, nullable=False),
)


connect_args = {"check_same_thread": False} if config.DATABASE_URL.startswith("sqlite") else {}
engine = sqlalchemy.create_engine(config.DATABASE_URL, connect_args=connect_args)

metadata.create_all(engine)

# databases passes driver errors through unwrapped
integrity_errors = (sqlalchemy.exc.IntegrityError, sqlite3.IntegrityError)

database = databases.Database(
    config.DATABASE_URL, force_rollback=config.DB_FORCE_ROLL_BACK
)
