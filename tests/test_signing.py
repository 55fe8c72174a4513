import os, base64, shutil, subprocess
import pytest

from cryptography.hazmat.primitives.serialization import pkcs7

from pushpkg import errors
from pushpkg.crypto.manifest import compute_manifest
from pushpkg.security.credentials import load_credentials, load_intermediate_certificate
from pushpkg.security.signing import extract_der_from_smime, sign

DER = bytes([0x30, 0x03, 0x02, 0x01, 0x07])


def _envelope(body, tail=b"--===============123==--"):
    return b"\r\n".join([
        b'MIME-Version: 1.0',
        b'',
        b'--===============123==',
        b'Content-Type: application/x-pkcs7-signature; name="smime.p7s"',
        b'Content-Transfer-Encoding: base64',
        b'Content-Disposition: attachment; filename="smime.p7s"',
        b'',
        body,
        b'',
        tail,
        b'',
    ])


def test_extract_der_from_envelope():
    assert extract_der_from_smime(_envelope(base64.b64encode(DER))) == DER


def test_extract_accepts_openssl_boundary_and_lf():
    content = _envelope(base64.b64encode(DER), tail=b"------4F1A2B3C--").replace(b"\r\n", b"\n")
    assert extract_der_from_smime(content) == DER


def test_extract_without_content_disposition():
    content = _envelope(base64.b64encode(DER)).replace(b"Content-Disposition", b"Content-Description")
    with pytest.raises(errors.UnexpectedContentOfPemSignature):
        extract_der_from_smime(content)


def test_extract_without_closing_delimiter():
    content = _envelope(base64.b64encode(DER), tail=b"")
    with pytest.raises(errors.UnexpectedContentOfPemSignature):
        extract_der_from_smime(content)


def test_extract_with_empty_body():
    with pytest.raises(errors.UnexpectedContentOfPemSignature):
        extract_der_from_smime(_envelope(b""))


def test_extract_with_bad_base64():
    with pytest.raises(errors.CanNotCreateDerSignatureByDecodingToBase64):
        extract_der_from_smime(_envelope(b"MAMCAQ"))


def test_extract_rejects_non_der_payload():
    with pytest.raises(errors.CanNotCreateDerSignatureByDecodingToBase64):
        extract_der_from_smime(_envelope(base64.b64encode(b"hello")))


def test_load_credentials(chain):
    creds = load_credentials(chain["p12"], chain["password"])
    assert creds.certificate == chain["leaf"]


def test_load_credentials_missing_file(tmp_path):
    with pytest.raises(errors.CanNotGetCertificateContent):
        load_credentials(str(tmp_path / "nope.p12"), "x")


def test_load_credentials_empty_file(tmp_path):
    p = tmp_path / "empty.p12"
    p.write_bytes(b"")
    with pytest.raises(errors.CanNotGetCertificateContent):
        load_credentials(str(p), "x")


def test_load_credentials_wrong_password(chain):
    with pytest.raises(errors.CanNotReadCertificateData):
        load_credentials(chain["p12"], "wrong")


def test_load_credentials_not_pkcs12(chain):
    with pytest.raises(errors.CanNotReadCertificateData):
        load_credentials(chain["root_pem"], chain["password"])


def test_load_credentials_without_certificate(chain):
    with pytest.raises(errors.CanNotGetResourceFromOpenedCertificate):
        load_credentials(chain["p12_no_cert"], chain["password"])


def test_load_credentials_without_key(chain):
    with pytest.raises(errors.CanNotGetPrivateKeyFromOpenedCertificate):
        load_credentials(chain["p12_no_key"], chain["password"])


def test_intermediate_pem_and_der(chain, tmp_path):
    assert load_intermediate_certificate(None) is None
    assert load_intermediate_certificate(chain["intermediate_pem"]) == chain["intermediate"]
    assert load_intermediate_certificate(chain["intermediate_der"]) == chain["intermediate"]
    junk = tmp_path / "junk.pem"
    junk.write_bytes(b"junk")
    with pytest.raises(errors.CanNotReadIntermediateCertificate):
        load_intermediate_certificate(str(junk))
    with pytest.raises(errors.CanNotReadIntermediateCertificate):
        load_intermediate_certificate(str(tmp_path / "missing.pem"))


def test_sign_leaves_der_signature(staged_dir, chain):
    compute_manifest(staged_dir)
    sign(staged_dir, chain["p12"], chain["password"], chain["intermediate_pem"])
    with open(os.path.join(staged_dir, "signature"), "rb") as f:
        sig = f.read()
    assert sig[0] == 0x30
    assert b"Content-Disposition" not in sig
    certs = pkcs7.load_der_pkcs7_certificates(sig)
    assert chain["leaf"] in certs
    assert chain["intermediate"] in certs


def test_sign_without_intermediate(staged_dir, chain):
    compute_manifest(staged_dir)
    sign(staged_dir, chain["p12"], chain["password"])
    with open(os.path.join(staged_dir, "signature"), "rb") as f:
        certs = pkcs7.load_der_pkcs7_certificates(f.read())
    assert certs == [chain["leaf"]]


def test_sign_without_manifest(staged_dir, chain):
    with pytest.raises(errors.CanNotSignManifest):
        sign(staged_dir, chain["p12"], chain["password"])


def _openssl_verify(sig_path, content_path, root_pem):
    return subprocess.run(
        ["openssl", "smime", "-verify", "-binary", "-inform", "DER",
         "-in", sig_path, "-content", content_path,
         "-CAfile", root_pem, "-purpose", "any", "-out", os.devnull],
        capture_output=True,
    )


@pytest.mark.skipif(shutil.which("openssl") is None, reason="openssl CLI not available")
def test_signature_verifies_and_detects_tampering(staged_dir, chain):
    compute_manifest(staged_dir)
    sign(staged_dir, chain["p12"], chain["password"], chain["intermediate_pem"])
    sig_path = os.path.join(staged_dir, "signature")
    manifest_path = os.path.join(staged_dir, "manifest.json")

    r = _openssl_verify(sig_path, manifest_path, chain["root_pem"])
    assert r.returncode == 0, r.stderr

    with open(manifest_path, "rb") as f:
        data = bytearray(f.read())
    data[2] ^= 0x01
    with open(manifest_path, "wb") as f:
        f.write(bytes(data))
    assert _openssl_verify(sig_path, manifest_path, chain["root_pem"]).returncode != 0
