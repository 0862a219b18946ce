from __future__ import annotations

import atexit
from typing import Dict, Optional, Union

import requests
import urllib3
from requests.adapters import HTTPAdapter, Retry

from .config import Config
from .logger import setup_logger

_logger = setup_logger()


class Downloader:
    """
    requests Session wrapper with retries and session recovery.
    """

    def __init__(self, config: Config) -> None:
        self.config = config

        # Network Configuration
        self.proxy_url = getattr(self.config, "proxy_url", None)
        self.verify_ssl = getattr(self.config, "verify_ssl", True)
        self.ca_bundle = getattr(self.config, "ca_bundle", None)
        self.retries = getattr(self.config, "retries", 3)

        # Timeouts (Connect, Read)
        self.timeout = (
            getattr(self.config, "timeout_connect", 10),
            getattr(self.config, "timeout_read", 60),
        )

        self.session: Optional[requests.Session] = None
        self._init_session()
        atexit.register(self.close)

    def _init_session(self) -> None:
        """
        Initializes (or Hard-Resets) the requests Session.
        Clears broken socket pools left over by a failed connection.
        """
        if self.session:
            self.session.close()

        self.session = requests.Session()

        # Ignore proxy/CA environment variables, the config is the only source
        self.session.trust_env = False

        if self.proxy_url:
            self.session.proxies.update({
                "http": self.proxy_url,
                "https": self.proxy_url,
            })

        # Final status must reach the caller: it decides what 200/304/... mean
        retry_strategy = Retry(
            total=self.retries,
            backoff_factor=0.3,
            status_forcelist=[500, 502, 503, 504],
            allowed_methods=["HEAD", "GET", "OPTIONS"],
            raise_on_status=False,
        )
        adapter = HTTPAdapter(pool_connections=4, pool_maxsize=4, max_retries=retry_strategy)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

        if not self.verify_ssl:
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
            self.session.verify = False
            _logger.warning("SSL verification disabled (Insecure).")
        else:
            self.session.verify = self.ca_bundle if self.ca_bundle else True

    def close(self) -> None:
        if self.session:
            self.session.close()

    def open(self, url: str, headers: Optional[Dict[str, Union[str, bytes]]] = None) -> requests.Response:
        """
        Start a streaming GET and return the response without checking its status.

        The caller owns the response and should use it as a context manager.
        A dropped connection or rejected proxy renews the session once.
        """
        max_logic_retries = 2

        for attempt in range(1, max_logic_retries + 1):
            try:
                if not self.session:
                    self._init_session()
                _logger.debug("GET %s (Attempt %d)", url, attempt)
                return self.session.get(url, headers=headers or {}, stream=True, timeout=self.timeout)
            except (requests.exceptions.ProxyError, requests.exceptions.ConnectionError) as e:
                if attempt < max_logic_retries:
                    _logger.warning("Connection rejected (%s). Renewing session and retrying...", e)
                    self._init_session()
                else:
                    _logger.error("Failed to reach %s after %d attempts.", url, max_logic_retries)
                    raise

        raise RuntimeError("Unreachable")
