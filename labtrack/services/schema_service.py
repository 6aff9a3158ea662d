# labtrack/services/schema_service.py
"""
Schema provisioning. Idempotent, safe to run on every cold path.

  1. create missing tables (users, logs, passwords)
  2. upgrade tables created by older versions: add missing columns/indexes
  3. seed the bootstrap administrator if its credential row is absent

Re-running against a provisioned store changes nothing. The seed step is
decided by an existence check, never by inserting and catching a conflict.
"""

from dataclasses import dataclass, field

from sqlalchemy import func, inspect, text
from sqlalchemy.orm import Session

from labtrack.config import settings
from labtrack.database import atomic, load_models
from labtrack.models.credential import Credential
from labtrack.models.log_entry import LogEntry
from labtrack.models.user import User
from labtrack.utils.clock import now_ms
from labtrack.utils.logger import get_logger
from labtrack.utils.security import hash_password
from labtrack.utils.tags import ADMIN

logger = get_logger(__name__)

OPEN_SESSION_INDEX = "ux_logs_one_open_session"


@dataclass
class SchemaReport:
    created_tables: list = field(default_factory=list)
    added_columns: list = field(default_factory=list)    # "table.column"
    created_indexes: list = field(default_factory=list)
    skipped_indexes: list = field(default_factory=list)
    resynced_users: int = 0
    seeded_admin: bool = False

    @property
    def changed(self) -> bool:
        return bool(self.created_tables or self.added_columns or self.created_indexes or self.seeded_admin)


def ensure_schema(db: Session) -> SchemaReport:
    report = SchemaReport()
    metadata = load_models()

    with atomic(db):
        conn = db.connection()
        existing_tables = set(inspect(conn).get_table_names())

        metadata.create_all(bind=conn, checkfirst=True)
        report.created_tables = [t.name for t in metadata.sorted_tables if t.name not in existing_tables]

        # Tables that already existed may predate some columns or indexes
        inspector = inspect(conn)
        for table in metadata.sorted_tables:
            if table.name not in existing_tables:
                continue
            _add_missing_columns(conn, inspector, table, report)
            _add_missing_indexes(db, conn, inspector, table, report)

        if any(name.startswith("users.") and name.endswith("Tag") for name in report.added_columns):
            report.resynced_users = _resync_tag_mirrors(db)

        report.seeded_admin = _seed_bootstrap_admin(db)

    if report.changed:
        logger.info(
            f"[SCHEMA] tables+={report.created_tables} columns+={report.added_columns} "
            f"indexes+={report.created_indexes} admin_seeded={report.seeded_admin}"
        )
    else:
        logger.debug("[SCHEMA] already provisioned")
    return report


def _add_missing_columns(conn, inspector, table, report: SchemaReport):
    present = {c["name"] for c in inspector.get_columns(table.name)}
    quote = conn.dialect.identifier_preparer.quote

    for column in table.columns:
        if column.name in present:
            continue
        ddl = f"ALTER TABLE {quote(table.name)} ADD COLUMN {quote(column.name)} {column.type.compile(dialect=conn.dialect)}"
        default = _server_default_sql(column)
        if default is not None:
            ddl += f" DEFAULT {default}"
            if not column.nullable:
                ddl += " NOT NULL"
        conn.execute(text(ddl))
        report.added_columns.append(f"{table.name}.{column.name}")
        logger.info(f"[SCHEMA] added column {table.name}.{column.name}")


def _server_default_sql(column):
    if column.server_default is None:
        return None
    arg = column.server_default.arg
    if isinstance(arg, str):
        return "'" + arg.replace("'", "''") + "'"
    return str(arg.text)


def _existing_index_names(conn, inspector, table_name: str) -> set:
    if conn.dialect.name == "sqlite":
        # Partial indexes are not reflected by every SQLAlchemy version
        rows = conn.execute(
            text("SELECT name FROM sqlite_master WHERE type = 'index' AND tbl_name = :t"),
            {"t": table_name},
        )
        return {row[0] for row in rows}
    return {ix["name"] for ix in inspector.get_indexes(table_name)}


def _add_missing_indexes(db: Session, conn, inspector, table, report: SchemaReport):
    present = _existing_index_names(conn, inspector, table.name)

    for index in table.indexes:
        if index.name in present:
            continue
        if index.name == OPEN_SESSION_INDEX and _has_duplicate_open_sessions(db):
            # Old versions allowed double check-ins; the service check still applies
            logger.warning(
                f"[SCHEMA] {OPEN_SESSION_INDEX} not created: some users have more than one open session"
            )
            report.skipped_indexes.append(index.name)
            continue
        index.create(bind=conn)
        report.created_indexes.append(index.name)


def _has_duplicate_open_sessions(db: Session) -> bool:
    dup = (
        db.query(LogEntry.user_id)
        .filter(LogEntry.time_out.is_(None))
        .group_by(LogEntry.user_id)
        .having(func.count(LogEntry.log_id) > 1)
        .first()
    )
    return dup is not None


def _resync_tag_mirrors(db: Session) -> int:
    """Freshly added mirror columns hold their default; rebuild them from Tags."""
    users = db.query(User).all()
    for user in users:
        user.set_tags(user.tags or 0)
    db.flush()
    logger.info(f"[SCHEMA] rebuilt tag mirror columns for {len(users)} users")
    return len(users)


def _seed_bootstrap_admin(db: Session) -> bool:
    admin_id = settings.BOOTSTRAP_ADMIN_ID
    if db.query(Credential).filter(Credential.student_id == admin_id).first() is not None:
        return False

    user = db.query(User).filter(User.student_id == admin_id).first()
    if user is None:
        user = User(
            student_id=admin_id,
            first_name=settings.BOOTSTRAP_ADMIN_FIRST_NAME,
            last_name=settings.BOOTSTRAP_ADMIN_LAST_NAME,
            logged_in=False,
        )
        user.set_tags(ADMIN)
        db.add(user)
        db.flush()

    db.add(Credential(
        student_id=admin_id,
        password_hash=hash_password(settings.BOOTSTRAP_ADMIN_PASSWORD),
        updated_at=now_ms(),
    ))
    logger.info(f"[SCHEMA] seeded bootstrap administrator {admin_id}")
    return True
