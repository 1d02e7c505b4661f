import re


_API_KEY_PARAMETER = re.compile(r'(api_key=)[^&#\s]*')


def clamp(value, min, max):
    return sorted((min, value, max))[1]


def redact_api_key(url: str) -> str:
    """
    Hide the value of the `api_key` query parameter so that URLs can be logged.
    """
    return _API_KEY_PARAMETER.sub(r'\1<redacted>', url)
