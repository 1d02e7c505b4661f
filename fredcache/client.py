import logging
from typing import Mapping, Optional, Sequence

from . import config
from .extract import FieldIter
from .model import Lookup, RequestSpec
from .request import build_request
from .resolver import DebugSink, Resolver, cache_request
from .store import CacheStore, FileStore
from .transport import RequestsTransport, Transport


logger = logging.getLogger(__name__)


class FredClient:
    """
    Fetches FRED data through a cache.

    ```python
    async with create('/var/cache/fred') as fred:
        observations = await fred.fields('series/observations?series_id=GNPCA&',
                                         'observation', ['date', 'value'])
        for date, value in observations:
            print(date, float(value))
    ```
    """

    def __init__(self,
                 store: CacheStore,
                 transport: Transport,
                 api_key: Optional[str] = None,
                 *,
                 debug_sink: Optional[DebugSink] = None,
                 environ: Optional[Mapping[str, str]] = None,
                 env_file: Optional[config.PathLike] = None) -> None:
        self.store = store
        self.transport = transport
        self.__api_key = api_key
        self.__environ = environ
        self.__env_file = env_file
        self.__resolver = Resolver(store, transport, debug_sink)

    async def fetch(self, query: str, lookup: Lookup = Lookup.FRED_ON_CACHE_MISS) -> bytes:
        spec, request = build_request(query, self.__api_key, environ=self.__environ, env_file=self.__env_file)
        return await self.__resolver.resolve(spec, request, lookup)

    async def fields(self,
                     query: str,
                     tag: str,
                     fields: Sequence[str],
                     lookup: Lookup = Lookup.FRED_ON_CACHE_MISS) -> FieldIter:
        return FieldIter(tag, fields, await self.fetch(query, lookup))

    def cached(self, query: str) -> Optional[bytes]:
        """
        Read a query's response from the cache. No API key is needed.
        """
        return cache_request(RequestSpec.from_fragment(query), self.store)

    async def close(self) -> None:
        await self.transport.close()
        self.store.close()

    async def __aenter__(self) -> 'FredClient':
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()


def create(directory: Optional[config.PathLike] = None,
           api_key: Optional[str] = None,
           *,
           debug_path: Optional[config.PathLike] = None,
           environ: Optional[Mapping[str, str]] = None,
           env_file: Optional[config.PathLike] = None) -> FredClient:
    """
    Build a client over a `FileStore`, taking the directory from `FRED_CACHE`
    if none is given.
    """
    directory = config.cache_directory(directory, environ, env_file)
    logger.info('Using cache directory {}.'.format(directory))
    return FredClient(FileStore(directory),
                      RequestsTransport(),
                      api_key,
                      debug_sink=DebugSink(debug_path) if debug_path is not None else None,
                      environ=environ,
                      env_file=env_file)
