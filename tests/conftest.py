import os

import httplib2
import pytest
from googleapiclient.errors import HttpError

os.environ["BACKEND_TOKEN"] = ""


def make_activity(index, email="user@example.com", events=None):
    return {
        "kind": "admin#reports#activity",
        "id": {
            "time": f"2024-06-01T00:{index // 60 % 60:02d}:{index % 60:02d}.000Z",
            "uniqueQualifier": str(1000 + index),
            "applicationName": "login",
            "customerId": "C0123abc",
        },
        "actor": {"email": email, "profileId": str(5000 + index), "callerType": "USER"},
        "ipAddress": "203.0.113.7",
        "events": events
        if events is not None
        else [{"type": "login", "name": "login_success", "parameters": []}],
    }


class FakeRequest:
    def __init__(self, source, params):
        self._source = source
        self._params = params

    def execute(self):
        return self._source.serve(self._params)


class FakeActivities:
    def __init__(self, source):
        self._source = source

    def list(self, **params):
        return FakeRequest(self._source, params)


class FakeReportsService:
    """In-memory stand-in for the Reports API ``activities().list()`` chain.

    Serves ``records`` in order, at most ``maxResults`` per page and at most
    ``page_limit`` per page when set. The page token is the offset of the
    next page. ``fail_on_call`` makes the N-th (1-based) execute raise.
    """

    def __init__(self, records, page_limit=None, fail_on_call=None):
        self.records = records
        self.page_limit = page_limit
        self.fail_on_call = fail_on_call
        self.calls = []

    def activities(self):
        return FakeActivities(self)

    def serve(self, params):
        self.calls.append(params)
        if self.fail_on_call is not None and len(self.calls) == self.fail_on_call:
            raise HttpError(
                httplib2.Response({"status": "500"}),
                b'{"error": {"code": 500, "message": "backend error"}}',
            )
        offset = int(params.get("pageToken") or 0)
        size = params["maxResults"]
        if self.page_limit is not None:
            size = min(size, self.page_limit)
        items = self.records[offset:offset + size]
        result = {"kind": "admin#reports#activities", "items": items}
        if offset + size < len(self.records):
            result["nextPageToken"] = str(offset + size)
        return result


@pytest.fixture
def records():
    return [make_activity(i) for i in range(1200)]


@pytest.fixture
def fake_service(records):
    return FakeReportsService(records, page_limit=100)
