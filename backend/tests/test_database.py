from sqlalchemy import create_engine, inspect
from sqlalchemy.pool import StaticPool

from database import init_db, session_scope


class RecordingSession:
    def __init__(self):
        self.closed = False

    def close(self):
        self.closed = True


def test_init_db_creates_listing_tables():
    engine = create_engine("sqlite://", poolclass=StaticPool)

    init_db(bind=engine)

    assert {'properties', 'user_favorites', 'property_views'} <= set(inspect(engine).get_table_names())


def test_session_scope_closes_session():
    session = RecordingSession()

    with session_scope(lambda: session) as db:
        assert db is session
        assert not session.closed

    assert session.closed


def test_session_scope_closes_on_error():
    session = RecordingSession()

    try:
        with session_scope(lambda: session):
            raise RuntimeError("boom")
    except RuntimeError:
        pass

    assert session.closed
