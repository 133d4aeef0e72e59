import json
import httpx
import pytest
from app import create_app
from app.extensions import db as _db
from app.services import v0_service


@pytest.fixture(scope="session")
def app():
    """Create application for testing."""
    app = create_app("testing")
    with app.app_context():
        _db.create_all()
        yield app
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    """Per-test database session; services commit, so tables are emptied afterwards."""
    with app.app_context():
        _db.session.begin_nested()
        yield _db
        _db.session.rollback()
        for table in reversed(_db.metadata.sorted_tables):
            _db.session.execute(table.delete())
        _db.session.commit()


@pytest.fixture
def screenshot_dir(app, tmp_path, monkeypatch):
    monkeypatch.setitem(app.config, "SCREENSHOT_DIR", str(tmp_path))
    monkeypatch.setitem(app.config, "STORAGE_BACKEND", "local")
    return tmp_path


def sse_body(*deltas, done=True):
    """Server-sent event stream carrying ``deltas`` as chat-completion chunks."""
    lines = [
        "data: " + json.dumps({"choices": [{"delta": {"content": delta}}]})
        for delta in deltas
    ]
    if done:
        lines.append("data: [DONE]")
    return ("\n\n".join(lines) + "\n\n").encode()


@pytest.fixture
def v0_transport(monkeypatch):
    """Route the v0 client through an httpx.MockTransport.

    Returns a list to append responses to (or exceptions to raise); every
    request is recorded in ``.requests``.
    """

    class Responses(list):
        pass

    responses = Responses()
    responses.requests = []

    def handler(request):
        responses.requests.append(request)
        item = responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    transport = httpx.MockTransport(handler)
    monkeypatch.setattr(
        v0_service, "_get_client", lambda: httpx.Client(transport=transport)
    )
    return responses


@pytest.fixture
def sse():
    return sse_body
