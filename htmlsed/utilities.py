"""
# HtmlSed: utilities.py

Licensed under "MIT No Attribution" (MIT-0), see LICENSE.

Common utility functions.
"""

import urllib.parse
import warnings
from typing import Optional

from htmlsed.constants import ABSOLUTE_URL_PREFIXES


def is_absolute_url(url: str) -> bool:
    return url.startswith(ABSOLUTE_URL_PREFIXES)


def resolve_url(base_url: str, url: str) -> str:
    """
    Resolve a (possibly relative) URL against a base URL.

    Resolution follows RFC 3986 as implemented by `urllib.parse.urljoin`.
    Malformed input that `urljoin` refuses (e.g. an unbalanced IPv6 bracket)
    leaves the URL unchanged, with a warning.
    """
    try:
        return urllib.parse.urljoin(base_url, url)
    except ValueError as value_error:
        warnings.warn(
            f'warning: cannot resolve `{url}` against base `{base_url}` ({value_error}); '
            f'left unchanged'
        )
        return url


def strip_quotes(value: str) -> str:
    """
    Strip the surrounding quotes from a quoted attribute value.

    A value is treated as quoted if it begins with a quote;
    the first and last characters are then dropped.
    """
    if value.startswith(("'", '"')):
        return value[1:-1]

    return value


def none_to_empty_string(string: Optional[str]) -> str:
    if string is None:
        return ''

    return string
