"""URL policy checks applied before a page is fetched."""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit

# ipaddress predicates that mark an address as non-public, with a label for
# the rejection message
_NON_PUBLIC_KINDS = (
    ("is_loopback", "loopback"),
    ("is_private", "private"),
    ("is_link_local", "link-local"),
    ("is_reserved", "reserved"),
    ("is_site_local", "site-local"),
)


@dataclass(frozen=True)
class UrlValidationResult:
    """Outcome of checking one URL against the policy."""

    is_valid: bool
    rejection_reason: Optional[str] = None

    @classmethod
    def accept(cls) -> UrlValidationResult:
        return cls(is_valid=True)

    @classmethod
    def reject(cls, reason: str) -> UrlValidationResult:
        return cls(is_valid=False, rejection_reason=reason)


class UrlValidator:
    """
    Decides whether a requested page may be fetched.

    The scheme and the presence of a host are always checked. Optionally the
    host must be on an allow-list, and with ``block_private_ips`` the
    converter refuses localhost, internal-looking names and non-public IP
    literals so it cannot be pointed at services on its own network.

    Example:
        validator = UrlValidator(block_private_ips=True)
        result = validator.validate("http://127.0.0.1/admin")
        if not result.is_valid:
            print(result.rejection_reason)
    """

    DEFAULT_SCHEMES = frozenset({"http", "https"})
    INTERNAL_SUFFIXES = (".internal", ".local", ".localhost", ".localdomain")
    LOCALHOST_NAMES = frozenset({"localhost", "localhost.localdomain"})

    def __init__(
        self,
        allowed_schemes: Optional[set[str] | frozenset[str]] = None,
        allowed_domains: Optional[set[str]] = None,
        block_private_ips: bool = False,
    ):
        """
        Args:
            allowed_schemes: Schemes that may be fetched (http and https if None)
            allowed_domains: Exact hostnames that may be fetched (any if None)
            block_private_ips: Refuse localhost, internal names and non-public IPs
        """
        self.allowed_schemes = frozenset(s.lower() for s in (allowed_schemes or self.DEFAULT_SCHEMES))
        self.allowed_domains = None if allowed_domains is None else {d.lower() for d in allowed_domains}
        self.block_private_ips = block_private_ips

    def validate(self, url: str) -> UrlValidationResult:
        """Check url and return the decision with a reason when it is refused."""
        try:
            parts = urlsplit(url)
            host = (parts.hostname or "").lower()
        except ValueError:
            return UrlValidationResult.reject("Invalid URL format")

        scheme = parts.scheme.lower()
        if scheme not in self.allowed_schemes:
            return UrlValidationResult.reject(
                f"Scheme '{parts.scheme}' not allowed (allowed: {', '.join(sorted(self.allowed_schemes))})"
            )

        if not host:
            return UrlValidationResult.reject("URL has no host")

        if self.allowed_domains is not None and host not in self.allowed_domains:
            return UrlValidationResult.reject(f"Host '{host}' is not an allowed domain")

        if self.block_private_ips:
            reason = self._internal_host_reason(host)
            if reason:
                return UrlValidationResult.reject(reason)

        return UrlValidationResult.accept()

    def _internal_host_reason(self, host: str) -> Optional[str]:
        """Why host points inside the network, or None if it looks public."""
        if host in self.LOCALHOST_NAMES:
            return f"Host '{host}' is localhost"

        suffix = next((s for s in self.INTERNAL_SUFFIXES if host.endswith(s)), None)
        if suffix:
            return f"Host '{host}' has internal suffix '{suffix}'"

        try:
            address = ipaddress.ip_address(host)
        except ValueError:
            # A name, not an IP literal
            return None

        for predicate, label in _NON_PUBLIC_KINDS:
            if getattr(address, predicate, False):
                return f"Address '{host}' is {label}"
        return None

    def is_valid(self, url: str) -> bool:
        return self.validate(url).is_valid
