"""
Download economic data from FRED (https://fred.stlouisfed.org/), caching the
raw responses so that repeated requests do not go back to FRED.
"""

from .client import FredClient, create
from .errors import (BuildError, CacheMiss, CacheReadFailed, CacheWriteFailed, ConfigError, ExtractError,
                     FieldNotFound, FredError, InvalidQueryFragment, MissingCredential, ResolveError, StoreError,
                     TransportError, UndecodableField, UnterminatedRecord, UpstreamStatus)
from .extract import FieldIter, extract
from .model import Lookup, RequestSpec, Response
from .request import BASE_URI, build_request
from .resolver import DebugSink, Resolver, cache_request
from .store import CacheStore, FileStore, MemoryStore
from .transport import RequestsTransport, Transport
