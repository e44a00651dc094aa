"""
Process-wide proxy authentication.

Credentials are read once from the environment and then applied to the
system-configured proxies of every request made by the wrapper.
"""

import urllib.parse
from typing import Dict, Optional, Tuple

import requests

from maven_wrapper.wrapper_settings import WrapperSettings


_proxy_credentials: Optional[Tuple[str, str]] = None
_configured = False


def configure_proxy_authentication() -> None:
    """
    Install proxy credentials for the lifetime of the process.

    Only the first call reads the environment; later calls do nothing.
    """
    global _proxy_credentials, _configured

    if _configured:
        return

    _proxy_credentials = WrapperSettings.get_proxy_credentials()
    _configured = True


def reset_proxy_authentication() -> None:
    """Forget installed credentials so the next configure call reads the environment again."""
    global _proxy_credentials, _configured

    _proxy_credentials = None
    _configured = False


def get_proxy_credentials() -> Optional[Tuple[str, str]]:
    return _proxy_credentials


def authenticated_proxies(url: str) -> Dict[str, str]:
    """
    Returns the proxies configured in the environment for a URL, with the
    installed credentials added to each proxy URL that has none of its own.
    """
    proxies = requests.utils.get_environ_proxies(url)
    if _proxy_credentials is None:
        return proxies

    user, password = _proxy_credentials
    return {scheme: _with_credentials(proxy, user, password) for scheme, proxy in proxies.items()}


def _with_credentials(proxy_url: str, user: str, password: str) -> str:
    parts = urllib.parse.urlsplit(proxy_url)
    if parts.username is not None or not parts.hostname:
        return proxy_url

    netloc = "%s:%s@%s" % (
        urllib.parse.quote(user, safe=""),
        urllib.parse.quote(password, safe=""),
        parts.netloc,
    )
    return urllib.parse.urlunsplit(parts._replace(netloc=netloc))
