"""API test fixtures — FastAPI app wired to the test database.

Invariants:
    - app.state carries the test DatabaseSessionManager, settings and a
      recording emitter; the lifespan is not run
    - get_settings is overridden so token signing matches the test settings
"""

import pytest
from httpx import ASGITransport, AsyncClient

from propertyhub.config import get_settings
from propertyhub.main import app
from tests.seed_data import make_user


@pytest.fixture
async def client(db_manager, settings, emitter):
    app.state.db = db_manager
    app.state.settings = settings
    app.state.emitter = emitter
    app.dependency_overrides[get_settings] = lambda: settings

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    for name in ("db", "settings", "emitter"):
        if hasattr(app.state, name):
            delattr(app.state, name)


@pytest.fixture
def login_as(seeded, test_db, tokens):
    """Create a user with `role_name` and return (user, auth headers)."""
    async def _login(role_name: str | None, **fields):
        role = seeded["roles"][role_name] if role_name else None
        user = await make_user(test_db, role, **fields)
        token = tokens.issue_access_token(user.user_id, role_name)
        return user, {"Authorization": f"Bearer {token}"}
    return _login
