"""
Web Page Fetcher Module

This module provides the default fetch capability used by fetcher workers:
- A shared requests session with a browser-like User-Agent
- A bounded timeout on every request
- A small error taxonomy so workers can treat every failure the same way

Failed URLs are not retried; the caller drops them.
"""

import logging

import requests
from requests.exceptions import RequestException, Timeout, ConnectionError

logger = logging.getLogger("fetcher")

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows; U; Windows NT 6.1; en-US; rv:1.9.2.13) "
    "Gecko/20101203 Firefox/3.6.13"
)


class FetchError(Exception):
    """Base class for every failure of the fetch capability."""

    def __init__(self, url: str, reason: str = ""):
        super().__init__(f"{url}: {reason}" if reason else url)
        self.url = url
        self.reason = reason


class FetchTimeout(FetchError):
    pass


class HostUnreachable(FetchError):
    pass


class NotFound(FetchError):
    pass


class FetchIOError(FetchError):
    pass


class Fetcher:
    """
    Thin wrapper around a requests session.

    Instances are callable as ``fetcher(url, timeout)`` so they can be passed
    wherever a fetch capability is expected.
    """

    def __init__(self, user_agent: str = DEFAULT_USER_AGENT, timeout: float = 15.0):
        """
        Args:
            user_agent (str): User agent string sent with every request
            timeout (float): Default request timeout in seconds
        """
        self.user_agent = user_agent
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({"User-Agent": self.user_agent})

    def fetch(self, url: str, timeout: float = None) -> str:
        """
        Fetch a URL and return its body as text.

        Args:
            url (str): The URL to fetch
            timeout (float, optional): Overrides the default timeout

        Returns:
            str: Response body (may be empty)

        Raises:
            FetchTimeout, HostUnreachable, NotFound, FetchIOError
        """
        timeout = self.timeout if timeout is None else timeout
        logger.debug(f"Fetching {url}")
        try:
            resp = self.session.get(url, timeout=timeout)
        except Timeout as e:
            raise FetchTimeout(url, str(e)) from e
        except ConnectionError as e:
            raise HostUnreachable(url, str(e)) from e
        except RequestException as e:
            raise FetchIOError(url, str(e)) from e

        if resp.status_code == 404:
            raise NotFound(url, "HTTP 404")
        if resp.status_code >= 400:
            raise FetchIOError(url, f"HTTP {resp.status_code}")
        return resp.text

    __call__ = fetch

    def close(self):
        self.session.close()
