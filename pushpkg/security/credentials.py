import logging
from typing import NamedTuple, Optional, Union

from cryptography import x509
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.hazmat.primitives.serialization import pkcs12

from pushpkg import errors

logger = logging.getLogger(__name__)

SigningKey = Union[rsa.RSAPrivateKey, ec.EllipticCurvePrivateKey]


class Credentials(NamedTuple):
    certificate: x509.Certificate
    private_key: SigningKey


def _read_bytes(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()


def load_credentials(certificate_path: str, password: str) -> Credentials:
    """
    Open a password protected PKCS#12 bundle and pull out the signing
    certificate and its private key. Every way this can go wrong has its
    own error so a bad password is not confused with a corrupt file.
    """
    try:
        pkcs12_data = _read_bytes(certificate_path)
    except OSError as e:
        raise errors.CanNotGetCertificateContent(
            f"Can not get certificate content from {certificate_path}: {e}", path=certificate_path) from e
    if not pkcs12_data:
        raise errors.CanNotGetCertificateContent(
            f"Certificate file {certificate_path} is empty", path=certificate_path)

    try:
        key, cert, _extra = pkcs12.load_key_and_certificates(
            pkcs12_data, password.encode("utf-8") if password else None)
    except (ValueError, TypeError) as e:
        raise errors.CanNotReadCertificateData(
            f"Can not read certificate data from {certificate_path} using given password", path=certificate_path) from e

    if key is None:
        raise errors.CanNotGetPrivateKeyFromOpenedCertificate(
            f"No private key inside {certificate_path}", path=certificate_path)
    if cert is None:
        raise errors.CanNotGetResourceFromOpenedCertificate(
            f"No certificate inside {certificate_path}", path=certificate_path)
    if not isinstance(key, (rsa.RSAPrivateKey, ec.EllipticCurvePrivateKey)):
        raise errors.CanNotGetPrivateKeyFromOpenedCertificate(
            f"Private key in {certificate_path} is {type(key).__name__}, need RSA or EC", path=certificate_path)

    logger.debug("loaded signing certificate %s", cert.subject.rfc4514_string())
    return Credentials(cert, key)


def load_intermediate_certificate(path: Optional[str]) -> Optional[x509.Certificate]:
    """PEM or DER (Apple ships the WWDR certificate as .cer)."""
    if not path:
        return None
    try:
        data = _read_bytes(path)
    except OSError as e:
        raise errors.CanNotReadIntermediateCertificate(
            f"Can not read intermediate certificate {path}: {e}", path=path) from e
    try:
        if b"-----BEGIN" in data:
            return x509.load_pem_x509_certificate(data)
        return x509.load_der_x509_certificate(data)
    except ValueError as e:
        raise errors.CanNotReadIntermediateCertificate(
            f"Intermediate certificate {path} is neither PEM nor DER", path=path) from e
