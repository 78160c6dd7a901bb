"""Development TLS material.

Writes a self-signed certificate and RSA key under ``<root>/cert`` plus
fixed 2048-bit DH parameters at ``<root>/dh2048.pem``. The material is for
local development only.
"""

import datetime
import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

from .errors import CommandError

if TYPE_CHECKING:
    from .build.build_context import BuildContext

logger = logging.getLogger(__name__)

KEY_SIZE = 2048
VALIDITY_DAYS = 3000

DH2048_PEM = (
    "-----BEGIN DH PARAMETERS-----\n"
    "MIIBCAKCAQEAn4f4Qn5SudFjEYPWTbUaOTLUH85YWmmPFW1+b5bRa9ygr+1wfamv\n"
    "VKVT7jO8c4msSNikUf6eEfoH0H4VTCaj+Habwu+Sj+I416r3mliMD4SjNsUJrBrY\n"
    "Y0QV3ZUgZz4A8ARk/WwQcRl8+ZXJz34IaLwAcpyNhoV46iHVxW0ty8ND0U4DIku/\n"
    "PNayKimu4BXWXk4RfwNVP59t8DQKqjshZ4fDnbotskmSZ+e+FHrd+Kvrq/WButvV\n"
    "Bzy9fYgnUlJ82g/bziCI83R2xAdtH014fR63MpElkqdNeChb94pPbEdFlNUvYIBN\n"
    "xx2vTUQMqRbB4UdG2zuzzr5j98HDdblQ+wIBAg==\n"
    "-----END DH PARAMETERS-----"
)


def _write(path: Path, data: bytes, mode: int = 0o644) -> None:
    try:
        fd = os.open(path, os.O_CREAT | os.O_TRUNC | os.O_WRONLY, mode)
        with os.fdopen(fd, "wb") as fp:
            fp.write(data)
    except OSError as e:
        raise CommandError(f"open({path}): {e.strerror or e}") from e
    logger.info(f"created {path}")


def build_certificate(app_name: str, key: rsa.RSAPrivateKey) -> x509.Certificate:
    """Create a self-signed X.509 v3 certificate for ``localhost``.

    Args:
        app_name: Application name, recorded in the organization field
        key: Private key that signs the certificate and whose public half it carries

    Returns:
        The signed certificate
    """
    now = datetime.datetime.now(datetime.timezone.utc)
    name = x509.Name(
        [
            x509.NameAttribute(NameOID.COUNTRY_NAME, "SE"),
            x509.NameAttribute(NameOID.ORGANIZATION_NAME, f"kbuild autogen: {app_name}"[:64]),
            x509.NameAttribute(NameOID.COMMON_NAME, "localhost"),
        ]
    )
    return (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(int(now.timestamp()))
        .not_valid_before(now)
        .not_valid_after(now + datetime.timedelta(days=VALIDITY_DAYS))
        .sign(key, hashes.SHA256())
    )


def generate_certs(context: "BuildContext") -> None:
    """Write dh2048.pem, cert/server.key and cert/server.crt.

    The cert directory must already exist.

    Raises:
        CommandError: If a file cannot be written
    """
    _write(context.root_dir / "dh2048.pem", DH2048_PEM.encode("ascii"))

    key = rsa.generate_private_key(public_exponent=65537, key_size=KEY_SIZE)
    cert = build_certificate(context.app_name, key)

    key_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )
    _write(context.cert_dir / "server.key", key_pem, mode=0o600)
    _write(context.cert_dir / "server.crt", cert.public_bytes(serialization.Encoding.PEM))


def ensure_certs(context: "BuildContext") -> bool:
    """Create ``cert/`` and its material when TLS is enabled and it is missing.

    Returns:
        True if new material was generated

    Raises:
        CommandError: If the directory or files cannot be created
    """
    if not context.tls or context.cert_dir.is_dir():
        return False

    try:
        context.cert_dir.mkdir(mode=0o700)
    except OSError as e:
        raise CommandError(f"mkdir({context.cert_dir}): {e.strerror or e}") from e

    generate_certs(context)
    return True
