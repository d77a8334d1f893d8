"""Test doubles: an in-memory HTTP server and a controllable clock."""

import asyncio
import json
from dataclasses import dataclass

import httpx


APP_KEY = "test-app-key"
APP_SECRET = "s3cr3t-signing-key-of-at-least-32-bytes!"
USER = "jdoe"
START = 1_700_000_000


class FakeClock:
    """Unix time that only moves when told to."""

    def __init__(self, now=START):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@dataclass
class SentRequest:
    method: str
    url: str
    headers: httpx.Headers
    body: bytes


class FakeServer:
    """Answers requests from a queue of canned responses, without network.

    Each queued item is either a (status, body) tuple, an exception to raise,
    or a callable taking the request and returning one of those. Requests are
    recorded when they arrive; ``completed`` only lists those that were
    answered, so a cancelled exchange never shows up there.
    """

    def __init__(self):
        self.requests = []
        self.completed = []
        self.responses = []
        self.default = (200, {})
        self.delay = 0

    def queue(self, *items):
        self.responses.extend(items)

    @property
    def transport(self):
        return httpx.MockTransport(self.handle)

    async def handle(self, request):
        sent = SentRequest(request.method, str(request.url), request.headers, request.content)
        self.requests.append(sent)
        item = self.responses.pop(0) if self.responses else self.default
        if self.delay:
            await asyncio.sleep(self.delay)

        if callable(item):
            item = item(sent)
        if isinstance(item, Exception):
            raise item

        status, body = item
        if isinstance(body, (dict, list)):
            content = json.dumps(body).encode('utf-8')
        elif isinstance(body, str):
            content = body.encode('utf-8')
        else:
            content = body or b''
        self.completed.append(sent)
        return httpx.Response(status, content=content,
                              headers={'Content-Type': 'application/json'})
