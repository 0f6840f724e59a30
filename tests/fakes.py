import time

import requests


class FakeHandle:
    def __init__(self, when, callback):
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    """Manual clock standing in for an event loop's call_later."""

    def __init__(self):
        self.now = 0.0
        self.handles = []

    def call_later(self, delay, callback):
        handle = FakeHandle(self.now + delay, callback)
        self.handles.append(handle)
        return handle

    @property
    def pending(self):
        return [h for h in self.handles if not h.cancelled]

    def advance(self, seconds):
        self.now += seconds
        due = [h for h in self.pending if h.when <= self.now]
        for handle in sorted(due, key=lambda h: h.when):
            self.handles.remove(handle)
            handle.callback()


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload
        self.content = b'' if payload is None else b'{}'

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error")

    def json(self):
        return self._payload


class FakeSession:
    """Records requests and replays queued responses (or raises)."""

    def __init__(self, responses=None):
        self.headers = {}
        self.calls = []
        self.responses = list(responses or [])
        self.closed = False

    def request(self, method, url, timeout=None, **kwargs):
        self.calls.append({'method': method, 'url': url, 'timeout': timeout, **kwargs})
        response = self.responses.pop(0) if self.responses else FakeResponse(200, {'ok': True})
        if isinstance(response, Exception):
            raise response
        return response

    def close(self):
        self.closed = True


def wait_for(predicate, timeout=2.0, interval=0.01):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        value = predicate()
        if value:
            return value
        time.sleep(interval)
    return predicate()

