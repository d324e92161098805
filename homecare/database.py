from threading import Lock

from sqlalchemy import create_engine, event, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from homecare.core import config


def _build_engine(url: str) -> Engine:
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, echo=config.DATABASE_ECHO, connect_args=connect_args)


engine = _build_engine(config.DATABASE_URL)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection.
    if dbapi_connection.__class__.__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


_schema_lock = Lock()
_scheduling_schema_checked = False


def ensure_scheduling_schema() -> None:
    global _scheduling_schema_checked

    if _scheduling_schema_checked:
        return

    with _schema_lock:
        if _scheduling_schema_checked:
            return

        inspector = inspect(engine)
        table_names = set(inspector.get_table_names())

        index_steps = []
        if 'availability' in table_names:
            index_steps.extend([
                'CREATE INDEX IF NOT EXISTS idx_availability_worker_day_from '
                'ON availability(worker_id, day_of_week, from_time)',
                'CREATE INDEX IF NOT EXISTS idx_availability_worker_date_from '
                'ON availability(worker_id, date, from_time)',
            ])
        if 'schedules' in table_names:
            index_steps.extend([
                'CREATE UNIQUE INDEX IF NOT EXISTS uq_schedules_slot_date ON schedules(slot_id, date)',
                'CREATE INDEX IF NOT EXISTS idx_schedules_event ON schedules(event_id)',
            ])
        if 'events' in table_names:
            index_steps.append(
                'CREATE INDEX IF NOT EXISTS idx_events_patient_date ON events(patient_id, date)'
            )

        if index_steps:
            with engine.begin() as connection:
                for statement in index_steps:
                    connection.execute(text(statement))

        _scheduling_schema_checked = True
