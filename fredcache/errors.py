"""
Exceptions raised by fredcache.

Everything derives from `FredError` so that callers can catch the whole family
at once. Resolution errors remember which request and which lookup policy were
involved, and extraction errors remember which record they belong to, so a
failure can be diagnosed from its message alone.
"""

from typing import Optional


class FredError(Exception):
    pass


class ConfigError(FredError):
    """
    A required setting could not be resolved from any source.
    """


class BuildError(FredError):
    pass


class MissingCredential(BuildError):
    def __init__(self) -> None:
        super().__init__('No FRED API key was given and FRED_API_KEY is not set')


class InvalidQueryFragment(BuildError):
    def __init__(self, fragment: str, reason: str) -> None:
        super().__init__('Invalid query fragment {!r}: {}'.format(fragment, reason))
        self.__fragment = fragment
        self.__reason = reason

    @property
    def fragment(self) -> str:
        return self.__fragment

    @property
    def reason(self) -> str:
        return self.__reason


class StoreError(FredError):
    """
    The cache store failed to read or write an entry.
    """


class ResolveError(FredError):
    """
    Base class for failures while resolving a request against the cache and FRED.

    @param spec
      The `RequestSpec` being resolved.
    @param lookup
      The `Lookup` policy in effect.
    """

    def __init__(self, spec, lookup, detail: str) -> None:
        super().__init__('{} (request {!r}, lookup {})'.format(detail, str(spec), lookup.value))
        self.__spec = spec
        self.__lookup = lookup

    @property
    def spec(self):
        return self.__spec

    @property
    def lookup(self):
        return self.__lookup


class CacheMiss(ResolveError):
    def __init__(self, spec, lookup) -> None:
        super().__init__(spec, lookup, 'No cached response')


class CacheReadFailed(ResolveError):
    def __init__(self, spec, lookup, cause: Exception) -> None:
        super().__init__(spec, lookup, 'Cache read failed: {}'.format(cause))
        self.__cause = cause

    @property
    def cause(self) -> Exception:
        return self.__cause


class UpstreamStatus(ResolveError):
    def __init__(self, spec, lookup, status: int, message: Optional[str] = None) -> None:
        detail = 'FRED responded with status {}'.format(status)
        if message:
            detail = '{}: {!r}'.format(detail, message)
        super().__init__(spec, lookup, detail)
        self.__status = status
        self.__message = message

    @property
    def status(self) -> int:
        return self.__status

    @property
    def message(self) -> Optional[str]:
        return self.__message


class TransportError(ResolveError):
    def __init__(self, spec, lookup, cause: Exception) -> None:
        super().__init__(spec, lookup, 'Request to FRED failed: {}'.format(cause))
        self.__cause = cause

    @property
    def cause(self) -> Exception:
        return self.__cause


class CacheWriteFailed(ResolveError):
    """
    A response was fetched but could not be cached.

    The resolver logs this rather than raising it; the fetched bytes are still
    returned to the caller.
    """

    def __init__(self, spec, lookup, cause: Exception) -> None:
        super().__init__(spec, lookup, 'Cache write failed: {}'.format(cause))
        self.__cause = cause

    @property
    def cause(self) -> Exception:
        return self.__cause


class ExtractError(FredError):
    """
    Base class for failures scoped to a single record.

    The iterator that raised it has already moved past the record, so
    iteration may continue.
    """

    def __init__(self, tag: str, offset: int, detail: str) -> None:
        super().__init__('{} in <{}> record at byte {}'.format(detail, tag, offset))
        self.__tag = tag
        self.__offset = offset

    @property
    def tag(self) -> str:
        return self.__tag

    @property
    def offset(self) -> int:
        return self.__offset


class FieldNotFound(ExtractError):
    def __init__(self, field: str, tag: str, offset: int) -> None:
        super().__init__(tag, offset, 'Field {!r} not found'.format(field))
        self.__field = field

    @property
    def field(self) -> str:
        return self.__field


class UndecodableField(ExtractError):
    def __init__(self, field: str, tag: str, offset: int, encoding: str) -> None:
        super().__init__(tag, offset, 'Field {!r} is not valid {}'.format(field, encoding))
        self.__field = field

    @property
    def field(self) -> str:
        return self.__field


class UnterminatedRecord(ExtractError):
    def __init__(self, tag: str, offset: int) -> None:
        super().__init__(tag, offset, 'No closing delimiter')
