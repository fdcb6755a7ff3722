# tests/conftest.py
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENABLE_SCHEDULER", "false")

from datetime import date, time, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from telemed.database import Base, get_db
from telemed.main import app
from telemed.models import Doctor, Patient, ScheduleSlot
from telemed.core.lifecycle import ScheduleSlotStatus


@pytest.fixture(scope="session")
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # pysqlite defers BEGIN; emit it ourselves so SAVEPOINTs nest inside the test transaction
    @event.listens_for(engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine

@pytest.fixture(scope="session")
def tables(engine):
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)

@pytest.fixture
def db_session(engine, tables):
    """Provides a transactional scope around each test; handler commits become savepoints."""
    connection = engine.connect()
    transaction = connection.begin()
    session = Session(bind=connection, join_transaction_mode="create_savepoint")

    yield session

    session.close()
    transaction.rollback()
    connection.close()

@pytest.fixture
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()

@pytest.fixture
def make_doctor(db_session):
    def _make(full_name="Dr. Test", specialization="General Medicine", experience_years=3, available=True, **kwargs):
        doctor = Doctor(
            full_name=full_name,
            specialization=specialization,
            experience_years=experience_years,
            available=available,
            **kwargs
        )
        db_session.add(doctor)
        db_session.commit()
        return doctor
    return _make

@pytest.fixture
def make_patient(db_session):
    def _make(user_id="user-1", full_name="Pat Patient", **kwargs):
        patient = Patient(user_id=user_id, full_name=full_name, **kwargs)
        db_session.add(patient)
        db_session.commit()
        return patient
    return _make

@pytest.fixture
def make_slot(db_session):
    def _make(doctor, days_ahead=1, start=time(9, 0), end=time(9, 30), status=ScheduleSlotStatus.AVAILABLE):
        slot = ScheduleSlot(
            doctor_id=doctor.id,
            date=date.today() + timedelta(days=days_ahead),
            start_time=start,
            end_time=end,
            status=status,
        )
        db_session.add(slot)
        db_session.commit()
        return slot
    return _make
