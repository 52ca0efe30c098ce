import random
import threading
import time

import pytest

from apicase.errors import TransportError
from apicase.http_client import HttpResponse


class FakeClient:
    """
    Stand-in for HttpClient.send().

    `routes` maps url -> status code, or -> an exception instance to raise.
    Unknown urls answer 200.
    """

    def __init__(self, routes=None, jitter=0.0):
        self.routes = routes or {}
        self.jitter = jitter
        self.calls = []
        self._lock = threading.Lock()

    def send(self, method, url, headers=None, body=None):
        with self._lock:
            self.calls.append((method, url, dict(headers or {}), body))
        if self.jitter:
            time.sleep(random.uniform(0, self.jitter))
        outcome = self.routes.get(url, 200)
        if isinstance(outcome, Exception):
            raise outcome
        return HttpResponse(status_code=outcome, body="{}", content_type="application/json")


@pytest.fixture
def fake_client():
    return FakeClient


@pytest.fixture
def sample_document():
    return """\
# smoke tests for the demo API
testcase: ping
description: service answers
url: https://example.com/ping
statuscode: 200
method: GET
---
testcase: create user
description: creates a user
author: qa
url: https://example.com/users
statuscode: 201
method: post
headers:
  Content-Type: application/json
  Authorization: Bearer abc
payload:
  name: alice
  age: 30
assertions:
  jsonPathExists: $.id
  jsonPathValue: $.name == "alice"
  headerExists: Location
  headerValue: Content-Type == application/json
---
"""


@pytest.fixture
def timeout_error():
    return TransportError("timeout")
