"""
Resolution of the two settings fredcache needs: the FRED API key and the cache
directory.

Precedence is always: an explicit argument, then the environment, then a
`.env` file if one is named. The environment is only read, never modified, so
resolving a setting has no side effects.
"""

import logging
import os
from pathlib import Path
from typing import Mapping, Optional, Union

from dotenv import dotenv_values

from .errors import ConfigError, MissingCredential


logger = logging.getLogger(__name__)

API_KEY_VARIABLE = 'FRED_API_KEY'
CACHE_VARIABLE = 'FRED_CACHE'

PathLike = Union[str, os.PathLike]


def lookup_setting(name: str,
                   explicit: Optional[str] = None,
                   environ: Optional[Mapping[str, str]] = None,
                   env_file: Optional[PathLike] = None) -> Optional[str]:
    """
    Find a setting by precedence. Empty values count as unset.

    @param name
      The environment variable naming the setting.
    @param explicit
      A value supplied by the caller. Wins over everything else.
    @param environ
      The environment to consult. Defaults to `os.environ`.
    @param env_file
      An optional dotenv file consulted last.
    @return
      The value, or `None` if no source provides one.
    """
    if explicit:
        return explicit

    environ = os.environ if environ is None else environ
    value = environ.get(name)
    if value:
        logger.debug('Using {} from the environment.'.format(name))
        return value

    if env_file is not None:
        value = dotenv_values(env_file).get(name)
        if value:
            logger.debug('Using {} from {}.'.format(name, env_file))
            return value

    return None


def api_key(explicit: Optional[str] = None,
            environ: Optional[Mapping[str, str]] = None,
            env_file: Optional[PathLike] = None) -> str:
    value = lookup_setting(API_KEY_VARIABLE, explicit, environ, env_file)
    if value is None:
        raise MissingCredential()
    return value


def cache_directory(explicit: Optional[PathLike] = None,
                    environ: Optional[Mapping[str, str]] = None,
                    env_file: Optional[PathLike] = None) -> Path:
    """
    Resolve the cache directory from `FRED_CACHE` unless one is given.
    """
    value = lookup_setting(CACHE_VARIABLE, os.fspath(explicit) if explicit is not None else None, environ, env_file)
    if value is None:
        raise ConfigError('No cache directory was given and {} is not set'.format(CACHE_VARIABLE))
    return Path(value)
