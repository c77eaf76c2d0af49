"""TLS trust policies for the Coveralls client.

VERIFY validates the server certificate chain against certifi's CA bundle
and checks the hostname. INSECURE accepts any certificate for any host; it
exists for networks that intercept TLS with self-signed proxy certificates
and must be enabled explicitly.
"""

from __future__ import annotations

import ssl
from enum import Enum

import certifi


class TlsPolicy(str, Enum):
    """Server certificate trust policy."""

    VERIFY = "verify"
    INSECURE = "insecure"


def get_ssl_context() -> ssl.SSLContext:
    """Get an SSL context that uses certifi's CA bundle.

    This is necessary for standalone binaries on macOS where Python
    cannot access the system's certificate store.

    Returns:
        An SSL context configured with certifi's CA certificates.
    """
    return ssl.create_default_context(cafile=certifi.where())


def get_insecure_ssl_context() -> ssl.SSLContext:
    """Get an SSL context that trusts every server certificate.

    Hostname checking and chain validation are both disabled.
    """
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    return context


def ssl_context_for(policy: TlsPolicy) -> ssl.SSLContext:
    """Build the SSL context implementing ``policy``."""
    if TlsPolicy(policy) is TlsPolicy.INSECURE:
        return get_insecure_ssl_context()
    return get_ssl_context()
