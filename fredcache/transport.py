from abc import ABC, abstractmethod
import asyncio
import logging
import threading
from typing import Callable, List

import requests

from .model import Response
from .util import redact_api_key


logger = logging.getLogger(__name__)


class Transport(ABC):
    """
    Sends a prepared request and returns the whole response.

    A transport knows nothing about caching. It reports network failures by
    raising `OSError`, which includes every `requests.RequestException`, and
    reports HTTP errors through `Response.status` rather than raising.
    """

    @abstractmethod
    async def send(self, request: requests.PreparedRequest) -> Response:
        """
        Send `request` and read the complete body.
        """

    async def close(self) -> None:
        pass


class RequestsTransport(Transport):
    """
    A transport backed by `requests` sessions.

    The blocking `send()` runs in a worker thread so the event loop stays free
    while the request is in flight. A `requests.Session` is not guaranteed to
    be thread-safe, so each worker thread gets its own from `session_factory`.
    """

    def __init__(self, session_factory: Callable[[], requests.Session] = requests.Session,
                 timeout: float = 30.0) -> None:
        self.__session_factory = session_factory
        self.__timeout = timeout
        self.__local = threading.local()
        self.__sessions: List[requests.Session] = []
        self.__lock = threading.Lock()

    def _session(self) -> requests.Session:
        session = getattr(self.__local, 'session', None)
        if session is None:
            session = self.__session_factory()
            self.__local.session = session
            with self.__lock:
                self.__sessions.append(session)
        return session

    def _send(self, request: requests.PreparedRequest) -> requests.Response:
        return self._session().send(request, timeout=self.__timeout)

    async def send(self, request: requests.PreparedRequest) -> Response:
        logger.info('Sending {} {}.'.format(request.method, redact_api_key(request.url)))
        requests_response = await asyncio.to_thread(self._send, request)
        response = Response(status=requests_response.status_code,
                            reason=requests_response.reason,
                            headers=dict(requests_response.headers),
                            body=requests_response.content)
        logger.info('Received {} {} with {} bytes.'.format(response.status, response.reason, len(response.body)))
        return response

    async def close(self) -> None:
        with self.__lock:
            sessions, self.__sessions = self.__sessions, []
        for session in sessions:
            session.close()
