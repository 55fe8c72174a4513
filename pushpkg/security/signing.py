import os, re, base64, binascii, logging
from typing import List, Optional

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.serialization import pkcs7

from pushpkg import errors
from pushpkg.layout import MANIFEST_JSON, SIGNATURE
from pushpkg.security.credentials import Credentials, load_credentials, load_intermediate_certificate

logger = logging.getLogger(__name__)

BASE64_LINE_RE = re.compile(rb"^[A-Za-z0-9+/=]+$")

SIGN_OPTIONS = [pkcs7.PKCS7Options.DetachedSignature, pkcs7.PKCS7Options.Binary]


def sign_manifest(manifest_path: str, signature_path: str, credentials: Credentials,
                  intermediate: Optional[x509.Certificate] = None) -> None:
    """Write the S/MIME (textual) detached signature of manifest_path to signature_path."""
    try:
        with open(manifest_path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise errors.CanNotSignManifest(f"Can not read manifest {manifest_path}: {e}", path=manifest_path) from e

    builder = pkcs7.PKCS7SignatureBuilder().set_data(data)
    builder = builder.add_signer(credentials.certificate, credentials.private_key, hashes.SHA256())
    if intermediate is not None:
        builder = builder.add_certificate(intermediate)
    try:
        smime = builder.sign(serialization.Encoding.SMIME, SIGN_OPTIONS)
    except (ValueError, TypeError) as e:
        raise errors.CanNotSignManifest(
            f"Failed signing of the manifest file {manifest_path} using given certificates", path=manifest_path) from e

    try:
        with open(signature_path, "wb") as f:
            f.write(smime)
    except OSError as e:
        raise errors.CanNotSignManifest(f"Can not write signature {signature_path}: {e}", path=signature_path) from e


def extract_der_from_smime(content: bytes) -> bytes:
    """
    The textual envelope is read as:

        ...
        Content-Disposition: attachment; filename="smime.p7s"
        <blank lines>
        <base64 lines>
        <blank lines>
        --<MIME boundary>

    Anything else is rejected; there is no best-effort recovery.
    """
    lines = content.splitlines()
    start = None
    for i, ln in enumerate(lines):
        if ln.lower().startswith(b"content-disposition:"):
            start = i + 1
            break
    if start is None:
        raise errors.UnexpectedContentOfPemSignature("signature envelope has no Content-Disposition header")

    i = start
    while i < len(lines) and not lines[i].strip():
        i += 1
    body: List[bytes] = []
    while i < len(lines) and BASE64_LINE_RE.match(lines[i].strip()):
        body.append(lines[i].strip())
        i += 1
    while i < len(lines) and not lines[i].strip():
        i += 1
    if not body:
        raise errors.UnexpectedContentOfPemSignature("signature envelope has an empty body")
    if i >= len(lines) or not lines[i].startswith(b"--"):
        raise errors.UnexpectedContentOfPemSignature("signature body is not followed by a MIME delimiter")

    try:
        der = base64.b64decode(b"".join(body), validate=True)
    except binascii.Error as e:
        raise errors.CanNotCreateDerSignatureByDecodingToBase64("signature body is not valid base64") from e
    # a DER PKCS#7 ContentInfo is a SEQUENCE
    if not der or der[0] != 0x30:
        raise errors.CanNotCreateDerSignatureByDecodingToBase64("decoded signature is not a DER structure")
    return der


def convert_signature_to_der(signature_path: str) -> bytes:
    try:
        with open(signature_path, "rb") as f:
            content = f.read()
    except OSError as e:
        raise errors.CanNotReadPemSignatureFromFile(
            f"Can not read PEM signature file {signature_path}: {e}", path=signature_path) from e
    if not content:
        raise errors.CanNotReadPemSignatureFromFile(f"PEM signature file {signature_path} is empty", path=signature_path)

    der = extract_der_from_smime(content)
    try:
        with open(signature_path, "wb") as f:
            f.write(der)
    except OSError as e:
        raise errors.CanNotSaveDerSignatureToFile(
            f"Can not save DER signature into {signature_path}: {e}", path=signature_path) from e
    return der


def sign(staging_dir: str, certificate_path: str, certificate_password: str,
         intermediate_certificate_path: Optional[str] = None) -> None:
    """Sign staging_dir/manifest.json and leave raw DER in staging_dir/signature."""
    credentials = load_credentials(certificate_path, certificate_password)
    intermediate = load_intermediate_certificate(intermediate_certificate_path)
    signature_path = os.path.join(staging_dir, SIGNATURE)
    sign_manifest(os.path.join(staging_dir, MANIFEST_JSON), signature_path, credentials, intermediate)
    der = convert_signature_to_der(signature_path)
    logger.debug("signature converted to DER: %s (%d bytes)", signature_path, len(der))
