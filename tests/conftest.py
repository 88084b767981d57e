import pytest
from fastapi.testclient import TestClient

from wellbeing_chat.config import Settings
from wellbeing_chat.database import Database
from wellbeing_chat.errors import UpstreamFailure
from wellbeing_chat.main import create_app


def completion(text):
    return {"choices": [{"message": {"role": "assistant", "content": text}}]}


_UNSET = object()


class StubLLM:
    """Records every prompt; answers with a fixed body or raises UpstreamFailure."""

    def __init__(self, reply="Tell me more", *, body=_UNSET, fail=False):
        self.body = completion(reply) if body is _UNSET else body
        self.fail = fail
        self.calls = []
        self.closed = False

    async def chat_completion(self, messages, **options):
        self.calls.append(messages)
        if self.fail:
            raise UpstreamFailure()
        return self.body

    async def aclose(self):
        self.closed = True


@pytest.fixture
def settings():
    return Settings(database_url="sqlite://", llm_api_key="test-key", _env_file=None)


@pytest.fixture
def database(settings):
    database = Database(settings.database_url)
    database.create_all()
    yield database
    database.dispose()


@pytest.fixture
def db(database):
    session = database.session()
    yield session
    session.close()


@pytest.fixture
def llm():
    return StubLLM()


@pytest.fixture
def client(settings, database, llm):
    app = create_app(settings, database=database, llm_client=llm)
    with TestClient(app) as c:
        yield c
