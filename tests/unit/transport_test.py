import threading
from unittest import IsolatedAsyncioTestCase, TestCase

from mockito import mock, unstub, verify, when
import requests

from fredcache.request import build_request
from fredcache.transport import RequestsTransport


BODY = b'<observations count="0"></observations>'


class TestRequestsTransport(IsolatedAsyncioTestCase):
    def setUp(self):
        _, self.request = build_request('series/observations?series_id=GNPCA&', 'secret-key-123')
        self.session = mock(requests.Session)
        self.sut = RequestsTransport(lambda: self.session, timeout=5.0)

    def tearDown(self):
        unstub()

    def _requests_response(self, status: int, reason: str, body: bytes) -> requests.Response:
        result = requests.Response()
        result.status_code = status
        result.reason = reason
        result.headers['Content-Type'] = 'text/xml; charset=UTF-8'
        result._content = body
        return result

    async def test_send(self):
        when(self.session).send(self.request, timeout=5.0).thenReturn(self._requests_response(200, 'OK', BODY))

        response = await self.sut.send(self.request)

        self.assertEqual(200, response.status)
        self.assertEqual('OK', response.reason)
        self.assertEqual(BODY, response.body)
        self.assertEqual('text/xml; charset=UTF-8', response.headers['Content-Type'])
        self.assertTrue(response.ok)

    async def test_error_status_is_returned_not_raised(self):
        when(self.session).send(self.request, timeout=5.0).thenReturn(
            self._requests_response(400, 'Bad Request', b'<error code="400" message="Bad Request."/>'))

        response = await self.sut.send(self.request)

        self.assertEqual(400, response.status)
        self.assertFalse(response.ok)

    async def test_network_failure_propagates(self):
        when(self.session).send(self.request, timeout=5.0).thenRaise(requests.ConnectionError('refused'))

        with self.assertRaises(OSError):
            await self.sut.send(self.request)

    async def test_api_key_is_not_logged(self):
        when(self.session).send(self.request, timeout=5.0).thenReturn(self._requests_response(200, 'OK', BODY))

        with self.assertLogs('fredcache.transport', level='INFO') as logs:
            await self.sut.send(self.request)

        self.assertTrue(logs.output)
        for line in logs.output:
            self.assertNotIn('secret-key-123', line)

    async def test_close_closes_the_session(self):
        when(self.session).send(self.request, timeout=5.0).thenReturn(self._requests_response(200, 'OK', BODY))
        await self.sut.send(self.request)
        when(self.session).close().thenReturn(None)

        await self.sut.close()

        verify(self.session).close()


class TestSessionPerThread(TestCase):
    def setUp(self):
        self.created = []
        self.sut = RequestsTransport(self._new_session)

    def _new_session(self) -> requests.Session:
        session = mock(requests.Session)
        self.created.append(session)
        return session

    def tearDown(self):
        unstub()

    def test_a_thread_reuses_its_session(self):
        self.assertIs(self.sut._session(), self.sut._session())
        self.assertEqual(1, len(self.created))

    def test_each_thread_gets_its_own_session(self):
        sessions = []
        threads = [threading.Thread(target=lambda: sessions.append(self.sut._session())) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(2, len(self.created))
        self.assertIsNot(sessions[0], sessions[1])
