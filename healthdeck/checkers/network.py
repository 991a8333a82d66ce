"""Network checkers — HTTP(S), TLS cert expiry, DNS resolve, TCP connect.

Each checker carries its own timeout; a probe that cannot reach its target
returns a CRITICAL result rather than raising. Anything unexpected is left
to ``Target.check()``, which records it as UNKNOWN.
"""

from __future__ import annotations

import socket
import ssl
import time
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import httpx

from healthdeck.checkers.base import BaseChecker
from healthdeck.errors import ConfigurationError
from healthdeck.health.result import Result

if TYPE_CHECKING:
    from healthdeck.health.target import Target


class HttpChecker(BaseChecker):
    """HTTP(S) check — expected status code plus a latency budget."""

    display_name = "HTTP"

    def __init__(
        self,
        url: str = "",
        method: str = "GET",
        expected_status: int = 200,
        timeout_ms: int = 10_000,
        slow_ms: int = 3_000,
        **options: Any,
    ) -> None:
        if not url:
            raise ConfigurationError("http checker requires a url")
        super().__init__(**options)
        self.url = url
        self.method = method.upper()
        self.expected_status = int(expected_status)
        self.timeout_ms = int(timeout_ms)
        self.slow_ms = int(slow_ms)

    def probe(self, target: Target) -> Result:
        t0 = time.perf_counter()
        try:
            with httpx.Client(timeout=self.timeout_ms / 1000, follow_redirects=True) as client:
                resp = client.request(self.method, self.url)
        except httpx.TimeoutException:
            return Result.critical(f"{self.url}: timed out ({self.timeout_ms}ms)")
        except httpx.TransportError as e:
            return Result.critical(f"{self.url}: connection error: {e}")
        latency = (time.perf_counter() - t0) * 1000

        if resp.status_code != self.expected_status:
            return Result.critical(
                f"{self.url}: expected {self.expected_status}, got {resp.status_code}"
            )
        if latency > self.slow_ms:
            return Result.warning(f"{self.url}: slow response ({latency:.0f}ms > {self.slow_ms}ms)")
        return Result.ok()


class TlsChecker(BaseChecker):
    """Certificate expiry check — WARNING inside the warning window, CRITICAL once expired."""

    display_name = "TLS certificate"

    def __init__(
        self,
        hostname: str = "",
        port: int = 443,
        warn_days_before: int = 14,
        timeout_ms: int = 10_000,
        **options: Any,
    ) -> None:
        if not hostname:
            raise ConfigurationError("tls checker requires a hostname")
        super().__init__(**options)
        self.hostname = hostname
        self.port = int(port)
        self.warn_days_before = int(warn_days_before)
        self.timeout_ms = int(timeout_ms)

    def fetch_expiry(self) -> datetime:
        ctx = ssl.create_default_context()
        with socket.create_connection((self.hostname, self.port), timeout=self.timeout_ms / 1000) as sock:
            with ctx.wrap_socket(sock, server_hostname=self.hostname) as ssock:
                cert = ssock.getpeercert()
        if not cert:
            raise ssl.SSLError("No certificate returned")
        not_after = cert.get("notAfter", "")
        return datetime.strptime(not_after, "%b %d %H:%M:%S %Y %Z").replace(tzinfo=timezone.utc)

    def probe(self, target: Target) -> Result:
        try:
            expiry = self.fetch_expiry()
        except (OSError, ssl.SSLError) as e:
            return Result.critical(f"{self.hostname}: TLS error: {type(e).__name__}: {e}")

        days_left = (expiry - datetime.now(timezone.utc)).days
        if days_left < 0:
            return Result.critical(f"{self.hostname}: certificate expired {-days_left} days ago")
        if days_left < self.warn_days_before:
            return Result.warning(
                f"{self.hostname}: certificate expires in {days_left} days "
                f"(warn < {self.warn_days_before})"
            )
        return Result.ok()


class DnsChecker(BaseChecker):
    display_name = "DNS"

    def __init__(self, hostname: str = "", timeout_ms: int = 5_000, **options: Any) -> None:
        if not hostname:
            raise ConfigurationError("dns checker requires a hostname")
        super().__init__(**options)
        self.hostname = hostname
        self.timeout_ms = int(timeout_ms)

    def probe(self, target: Target) -> Result:
        try:
            socket.setdefaulttimeout(self.timeout_ms / 1000)
            addrs = socket.getaddrinfo(self.hostname, None)
        except socket.gaierror as e:
            return Result.critical(f"{self.hostname}: DNS resolution failed: {e}")
        except OSError as e:
            return Result.critical(f"{self.hostname}: DNS error: {type(e).__name__}: {e}")
        finally:
            socket.setdefaulttimeout(None)
        if not addrs:
            return Result.critical(f"{self.hostname}: no addresses returned")
        return Result.ok()


class TcpChecker(BaseChecker):
    """Raw TCP port connectivity."""

    display_name = "TCP"

    def __init__(
        self,
        hostname: str = "",
        port: int = 443,
        timeout_ms: int = 5_000,
        **options: Any,
    ) -> None:
        if not hostname:
            raise ConfigurationError("tcp checker requires a hostname")
        super().__init__(**options)
        self.hostname = hostname
        self.port = int(port)
        self.timeout_ms = int(timeout_ms)

    def probe(self, target: Target) -> Result:
        try:
            sock = socket.create_connection((self.hostname, self.port), timeout=self.timeout_ms / 1000)
        except OSError as e:
            return Result.critical(
                f"{self.hostname}:{self.port}: connect failed: {type(e).__name__}: {e}"
            )
        sock.close()
        return Result.ok()
