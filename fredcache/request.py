"""
Builds FRED requests from the middle part of the request URL.

See the FRED API documentation to build requests. Each request category has an
example such as:

```text
https://api.stlouisfed.org/fred/series/observations?series_id=GNPCA&api_key=abcdefghijklmnopqrstuvwxyz123456
                                ------------------------------------
```

The underlined part is the query fragment. Nothing here touches the network.
"""

import logging
from typing import Mapping, Optional, Tuple
from urllib.parse import quote

import requests

from . import config
from .errors import InvalidQueryFragment
from .model import RequestSpec
from .util import redact_api_key


logger = logging.getLogger(__name__)

BASE_URI = 'https://api.stlouisfed.org/fred'

HEADERS = {
    'Accept': 'application/xml',
    'User-Agent': 'fredcache',
}


def build_request(fragment: str,
                  api_key: Optional[str] = None,
                  *,
                  environ: Optional[Mapping[str, str]] = None,
                  env_file: Optional[config.PathLike] = None) -> Tuple[RequestSpec, requests.PreparedRequest]:
    """
    Build the cache identity and the outbound request for a query.

    @param fragment
      The request category and its parameters, e.g.
      "series/observations?series_id=GNPCA&".
    @param api_key
      The FRED API key. If `None`, `FRED_API_KEY` is read from `environ` and
      then from `env_file`.
    @return
      The `RequestSpec`, which does not depend on the key, and a prepared GET
      request for the full URL.
    @throws InvalidQueryFragment
      If the fragment is unusable.
    @throws MissingCredential
      If no API key can be found.
    """
    spec = RequestSpec.from_fragment(fragment)
    key = config.api_key(api_key, environ, env_file)

    url = '{}/{}api_key={}'.format(BASE_URI, spec.fragment, quote(key, safe=''))
    try:
        prepared = requests.Request('GET', url, headers=dict(HEADERS)).prepare()
    except requests.RequestException as e:
        raise InvalidQueryFragment(fragment, str(e)) from e

    logger.debug('Built request {} for {}.'.format(redact_api_key(prepared.url), spec))
    return spec, prepared
