import os

# Configure the app for tests before any marketplace module is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CLOSURE_CRON_RUNNER"] = "off"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"
for _key in ("FIREBASE_PROJECT_ID", "FIREBASE_CLIENT_EMAIL", "FIREBASE_PRIVATE_KEY"):
    os.environ.pop(_key, None)

from datetime import date, time  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from marketplace import models  # noqa: E402
from marketplace.database import Base  # noqa: E402


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def provider(db):
    user = models.User(firebase_uid="provider-uid", email="provider@example.com", full_name="Ana")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def client_user(db):
    user = models.User(firebase_uid="client-uid", email="client@example.com", full_name="Luis")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def make_appointment(db, provider, client_user):
    def _make(**overrides):
        values = {
            "client_id": client_user.id,
            "provider_id": provider.id,
            "date": date(2024, 1, 10),
            "start_time": time(13, 0),
            "end_time": time(14, 0),
            "price": 119000,
            "payment_method": "cash",
            "status": "completed",
        }
        values.update(overrides)
        appointment = models.Appointment(**values)
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    return _make


@pytest.fixture
def set_setting(db):
    def _set(key, value):
        db.add(models.PlatformSetting(setting_key=key, setting_value=value))
        db.commit()

    return _set


class RecordingNotifier:
    def __init__(self, fail=False):
        self.calls = []
        self.fail = fail

    def __call__(self, db, user_id, title, body, data):
        self.calls.append({"user_id": user_id, "title": title, "body": body, "data": data})
        if self.fail:
            raise RuntimeError("push backend down")


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def failing_notifier():
    return RecordingNotifier(fail=True)
