"""
Answers requests from the cache, from FRED, or both, according to a `Lookup`.

Only successful FRED responses are cached. The cache write happens after the
whole body has been received, so abandoning a resolution part way through
never leaves a partial entry behind. Concurrent resolutions of the same request
are independent of each other; two of them may both go to FRED.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import Optional, Union

import requests

from .errors import CacheMiss, CacheReadFailed, CacheWriteFailed, ExtractError, StoreError, TransportError, UpstreamStatus
from .extract import FieldIter
from .model import Lookup, RequestSpec, Response
from .store import CacheStore
from .transport import Transport


logger = logging.getLogger(__name__)


class DebugSink:
    """
    Mirrors every response body to a fixed file for inspection.

    Failing to write the file is logged and otherwise ignored. The write is
    synchronous and runs on the event loop, so a large body holds up other
    resolutions while it is written. It is meant for debugging sessions, not
    for servers handling many concurrent requests.
    """

    def __init__(self, path: Union[str, os.PathLike]) -> None:
        self.__path = Path(path)

    @property
    def path(self) -> Path:
        return self.__path

    def write(self, body: bytes) -> None:
        try:
            self.__path.parent.mkdir(parents=True, exist_ok=True)
            self.__path.write_bytes(body)
        except OSError as e:
            logger.warning('Could not write debug copy of response to {}: {}'.format(self.__path, e))


def cache_request(spec: RequestSpec, store: CacheStore) -> Optional[bytes]:
    """
    Look a request up in the cache only, without going through the event loop.

    @return
      The cached bytes, or `None` on a cache miss.
    """
    return store.get(spec.key)


def upstream_message(body: bytes) -> Optional[str]:
    """
    Read the message out of a FRED error body such as
    `<error code="400" message="Bad Request. Variable api_key is not set."/>`.
    """
    try:
        row = next(FieldIter('error', ['message'], body), None)
    except ExtractError:
        return None
    return row[0] if row else None


class Resolver:
    def __init__(self, store: CacheStore, transport: Transport, debug_sink: Optional[DebugSink] = None) -> None:
        self.__store = store
        self.__transport = transport
        self.__debug_sink = debug_sink

    async def resolve(self, spec: RequestSpec, request: requests.PreparedRequest, lookup: Lookup) -> bytes:
        """
        Produce the response bytes for a request.

        @param spec
          The identity of the request; used as the cache key.
        @param request
          The outbound request, sent only if the lookup policy requires it.
        @param lookup
          Where to look for the response.
        @throws CacheMiss
          For `Lookup.CACHE_ONLY` when nothing is cached.
        @throws CacheReadFailed
          If the store could not be read.
        @throws UpstreamStatus
          If FRED answered with an unsuccessful status.
        @throws TransportError
          If FRED could not be reached.
        """
        if lookup.reads_cache:
            logger.info('Looking in the cache for {}.'.format(spec))
            try:
                cached = await asyncio.to_thread(self.__store.get, spec.key)
            except StoreError as e:
                raise CacheReadFailed(spec, lookup, e) from e

            if cached is not None:
                logger.info('Cache hit for {}.'.format(spec))
                self._mirror(cached)
                return cached

            logger.info('Cache miss for {}.'.format(spec))
            if not lookup.fetches:
                raise CacheMiss(spec, lookup)

        return await self._fetch(spec, request, lookup)

    async def _fetch(self, spec: RequestSpec, request: requests.PreparedRequest, lookup: Lookup) -> bytes:
        try:
            response: Response = await self.__transport.send(request)
        except OSError as e:
            raise TransportError(spec, lookup, e) from e

        self._mirror(response.body)

        if not response.ok:
            raise UpstreamStatus(spec, lookup, response.status, upstream_message(response.body))

        try:
            await asyncio.to_thread(self.__store.put, spec.key, response.body)
        except StoreError as e:
            # The caller still gets the bytes.
            logger.error(str(CacheWriteFailed(spec, lookup, e)))
        else:
            logger.info('Cached {} bytes for {}.'.format(len(response.body), spec))

        return response.body

    def _mirror(self, body: bytes) -> None:
        if self.__debug_sink is not None:
            self.__debug_sink.write(body)
