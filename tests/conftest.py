import pytest
from werkzeug.test import EnvironBuilder
from werkzeug.wrappers import Request, Response

from cors_middleware import PolicyConfig


class RecordingHandler:
    """Downstream handler that counts calls and returns a fresh response."""

    def __init__(self, body='downstream', status=200, headers=None):
        self.body = body
        self.status = status
        self.headers = headers or {}
        self.calls = 0

    def handle(self, request):
        self.calls += 1
        return Response(self.body, status=self.status, headers=dict(self.headers))


def make_request(method='GET', headers=None, path='/'):
    return Request(EnvironBuilder(path=path, method=method, headers=headers or {}).get_environ())


@pytest.fixture
def handler():
    return RecordingHandler()


@pytest.fixture
def config():
    return PolicyConfig(
        allowed_origins=['https://a.com'],
        allowed_methods=['GET', 'POST'],
        allowed_headers=['x-custom'],
        supports_credentials=True,
        max_age=600,
    )
