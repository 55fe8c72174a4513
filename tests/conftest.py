"""Fixtures: a throwaway CA chain, a PKCS#12 signing bundle and dummy icons."""

import datetime
import pytest

from cryptography import x509
from cryptography.x509.oid import NameOID
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import pkcs12

from pushpkg.config import IconSet, PushPackageConfig
from pushpkg.layout import ICON_FILES
from pushpkg.package import assembler

CERT_PASSWORD = "s3cret-pass"
PNG_MAGIC = b"\x89PNG\r\n\x1a\n"


def _name(cn):
    return x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, cn)])


def _key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


def _cert(subject_cn, subject_key, issuer_cn, issuer_key, ca):
    now = datetime.datetime.now(datetime.timezone.utc)
    b = (
        x509.CertificateBuilder()
        .subject_name(_name(subject_cn))
        .issuer_name(_name(issuer_cn))
        .public_key(subject_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=30))
        .add_extension(x509.BasicConstraints(ca=ca, path_length=None), critical=True)
        .add_extension(x509.KeyUsage(
            digital_signature=True, content_commitment=False, key_encipherment=not ca,
            data_encipherment=False, key_agreement=False, key_cert_sign=ca, crl_sign=ca,
            encipher_only=False, decipher_only=False), critical=True)
        .add_extension(x509.SubjectKeyIdentifier.from_public_key(subject_key.public_key()), critical=False)
        .add_extension(x509.AuthorityKeyIdentifier.from_issuer_public_key(issuer_key.public_key()), critical=False)
    )
    return b.sign(issuer_key, hashes.SHA256())


def _write(path, data):
    with open(path, "wb") as f:
        f.write(data)
    return str(path)


@pytest.fixture(scope="session")
def chain(tmp_path_factory):
    """
    root CA -> intermediate CA -> leaf, plus the files a deployment has:
    leaf+key as password protected .p12, intermediate as PEM, root as PEM.
    """
    d = tmp_path_factory.mktemp("certs")
    root_key, inter_key, leaf_key = _key(), _key(), _key()
    root = _cert("Test Root CA", root_key, "Test Root CA", root_key, ca=True)
    inter = _cert("Test Intermediate CA", inter_key, "Test Root CA", root_key, ca=True)
    leaf = _cert("Website Push ID: web.com.example.test", leaf_key, "Test Intermediate CA", inter_key, ca=False)

    enc = serialization.BestAvailableEncryption(CERT_PASSWORD.encode("utf-8"))
    pem = serialization.Encoding.PEM
    return {
        "leaf": leaf,
        "intermediate": inter,
        "root": root,
        "password": CERT_PASSWORD,
        "p12": _write(d / "push.p12", pkcs12.serialize_key_and_certificates(b"push", leaf_key, leaf, None, enc)),
        "p12_no_key": _write(d / "nokey.p12", pkcs12.serialize_key_and_certificates(b"push", None, leaf, None, enc)),
        "p12_no_cert": _write(d / "nocert.p12", pkcs12.serialize_key_and_certificates(b"push", leaf_key, None, None, enc)),
        "intermediate_pem": _write(d / "intermediate.pem", inter.public_bytes(pem)),
        "intermediate_der": _write(d / "intermediate.cer", inter.public_bytes(serialization.Encoding.DER)),
        "root_pem": _write(d / "root.pem", root.public_bytes(pem)),
    }


@pytest.fixture
def icons_dir(tmp_path):
    d = tmp_path / "icons"
    d.mkdir()
    for i, name in enumerate(ICON_FILES.values()):
        _write(d / name, PNG_MAGIC + f"dummy icon {i} {name}".encode("utf-8"))
    return str(d)


@pytest.fixture
def temp_root(tmp_path):
    d = tmp_path / "packages"
    d.mkdir()
    return str(d)


@pytest.fixture
def config(chain, icons_dir, temp_root):
    return PushPackageConfig(
        website_name="Example Test",
        website_push_id="web.com.example.test",
        allowed_domains=["https://example.com"],
        url_format_string="https://example.com/a?id=%@",
        web_service_url="https://push.example.com/",
        icons=IconSet.from_dir(icons_dir),
        certificate_path=chain["p12"],
        certificate_password=chain["password"],
        intermediate_certificate_path=chain["intermediate_pem"],
        temporary_dir=temp_root,
    )


@pytest.fixture
def staged_dir(tmp_path, icons_dir):
    """A staging dir holding the seven required files, not yet hashed."""
    d = tmp_path / "staged"
    d.mkdir()
    assembler.stage_files(str(d), IconSet.from_dir(icons_dir).paths(), b'{"websiteName":"x"}')
    return str(d)
