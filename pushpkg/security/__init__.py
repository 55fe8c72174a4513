from .credentials import Credentials, load_credentials, load_intermediate_certificate
from .signing import sign, sign_manifest, convert_signature_to_der, extract_der_from_smime

__all__ = [
    "Credentials", "load_credentials", "load_intermediate_certificate",
    "sign", "sign_manifest", "convert_signature_to_der", "extract_der_from_smime",
]
