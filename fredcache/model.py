"""
Defines the types passed between the builder, the resolver and the stores.

These types are as simple as possible in order to most conveniently consume and
produce instances of them.
"""

from dataclasses import dataclass, field
import enum
import re
from typing import Mapping

from .errors import InvalidQueryFragment


_FORBIDDEN_CHARACTERS = re.compile(r'[\s\x00-\x1f\x7f]')
_API_KEY_PARAMETER = re.compile(r'(?:^|[?&])api_key=')
_REQUEST_PATH = re.compile(r'[\w.-]+(?:/[\w.-]+)*')


@dataclass(frozen=True)
class RequestSpec:
    """
    The identity of a FRED query: the middle part of the request URL.

    ```text
    https://api.stlouisfed.org/fred/series/observations?series_id=GNPCA&api_key=abcd
                                    -------------------------------------
    ```

    The host is removed from the left and the API key from the right, so that
    two requests for the same data share a cache entry whichever key fetched
    them.
    """

    fragment: str
    """
    The normalized query fragment, always ending in "?" or "&".
    """

    @classmethod
    def from_fragment(cls, fragment: str) -> 'RequestSpec':
        """
        Validate and normalize a query fragment.

        @param fragment
          The request category path plus query parameters, e.g.
          "series/observations?series_id=GNPCA&".
        @throws InvalidQueryFragment
          If the fragment is empty, contains whitespace or "#", names a host,
          carries its own API key or does not start with a request path.
        """
        if not fragment or not fragment.strip('/'):
            raise InvalidQueryFragment(fragment, 'fragment is empty')
        if _FORBIDDEN_CHARACTERS.search(fragment):
            raise InvalidQueryFragment(fragment, 'fragment contains whitespace or control characters')
        if '://' in fragment:
            raise InvalidQueryFragment(fragment, 'fragment must not include the host')
        if _API_KEY_PARAMETER.search(fragment):
            raise InvalidQueryFragment(fragment, 'the API key is supplied separately')
        if '#' in fragment:
            raise InvalidQueryFragment(fragment, 'fragment must not contain "#"')

        normalized = fragment.lstrip('/')
        if not _REQUEST_PATH.fullmatch(normalized.partition('?')[0]):
            raise InvalidQueryFragment(fragment, 'fragment must start with a request path')
        if '?' not in normalized:
            normalized += '?'
        elif not normalized.endswith(('?', '&')):
            normalized += '&'
        return cls(normalized)

    @property
    def key(self) -> bytes:
        """
        The cache key. Stable across processes since the cache is persistent.
        """
        return self.fragment.encode('utf-8')

    def __str__(self) -> str:
        return self.fragment


@dataclass
class Response:
    """
    Represents a response from FRED, without any bells and whistles.
    """

    status: int
    """
    The status code of the response. E.g., 200 or 400.
    """

    reason: str
    """
    The reason string, which relates to the status code.
    """

    headers: Mapping[str, str]
    """
    All the headers sent with the response.
    """

    body: bytes = field(repr=False)
    """
    The complete response payload.
    """

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class Lookup(enum.Enum):
    """
    Determines where a request is answered from. A successful request to FRED
    is always written to the cache.
    """

    FRED_ON_CACHE_MISS = 'fred_on_cache_miss'
    FRED_ONLY = 'fred_only'
    CACHE_ONLY = 'cache_only'

    @classmethod
    def from_str(cls, value: str) -> 'Lookup':
        try:
            return cls(value)
        except ValueError:
            raise ValueError('Could not parse {!r} as a lookup method'.format(value)) from None

    @property
    def reads_cache(self) -> bool:
        return self is not Lookup.FRED_ONLY

    @property
    def fetches(self) -> bool:
        return self is not Lookup.CACHE_ONLY
