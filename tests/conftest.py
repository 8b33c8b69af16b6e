import pytest
from httpx import ASGITransport, AsyncClient

from fakes import DUNE, FakeCatalog
from shelfmate.main import app

BASE = "http://test"


@pytest.fixture
def catalog() -> FakeCatalog:
    return FakeCatalog([DUNE])


@pytest.fixture
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url=BASE) as c:
        yield c
    app.dependency_overrides.clear()
