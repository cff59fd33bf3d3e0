"""
Bounded pool of reusable HTTP clients

Every outbound request the pipeline makes goes through a client checked out
of a :class:`ClientPool`, so the pool size caps network concurrency no matter
how many page tasks are in flight.
"""

import queue
from contextlib import contextmanager
from logging import getLogger

import requests
from django.core.exceptions import ImproperlyConfigured

logger = getLogger(__name__)

USER_AGENT = "mangasync-ingest/1.0"


class HttpClient:
    """
    A requests Session paired with the per-request timeout every call uses
    """

    def __init__(self, session, timeout):
        self.session = session
        self.timeout = timeout

    def get(self, url, **kwargs):
        kwargs.setdefault("timeout", self.timeout)
        return self.session.get(url, **kwargs)

    def close(self):
        self.session.close()


def build_session():
    session = requests.Session()
    session.headers.update({"User-Agent": USER_AGENT})
    return session


class ClientPool:
    def __init__(self, size=1, timeout=2 * 60, session_factory=build_session):
        if size < 1:
            raise ImproperlyConfigured("The client pool needs at least one client")

        self.size = size
        self.timeout = timeout
        self._clients = queue.Queue(maxsize=size)
        for _ in range(size):
            self._clients.put_nowait(HttpClient(session_factory(), timeout))

        logger.info("There are %s HTTP clients available for use", size)

    @classmethod
    def from_config(cls, config, **kwargs):
        return cls(
            size=config.client_pool_size, timeout=config.client_timeout, **kwargs
        )

    @property
    def available(self):
        return self._clients.qsize()

    def acquire(self):
        """
        Check out a client, blocking until one is free
        """
        return self._clients.get()

    def release(self, client):
        self._clients.put_nowait(client)

    @contextmanager
    def client(self):
        """
        Scoped acquisition: the client goes back to the pool even when the
        body raises.

        Usage:
            with pool.client() as client:
                resp = client.get(url)
        """
        client = self.acquire()
        try:
            yield client
        finally:
            self.release(client)

    def close(self):
        while True:
            try:
                self._clients.get_nowait().close()
            except queue.Empty:
                break
