"""Typed failures of the push package pipeline."""

from typing import Optional


class PushPackageError(RuntimeError):
    error_code = "push_package_error"

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


# ---- configuration (raised at construction only) ----

class ConfigurationError(PushPackageError):
    error_code = "invalid_configuration"

class InvalidFormatOfWebsitePushId(ConfigurationError):
    error_code = "invalid_website_push_id"

class NoAllowedDomains(ConfigurationError):
    error_code = "no_allowed_domains"

class AllowedDomainHasInvalidFormat(ConfigurationError):
    error_code = "invalid_allowed_domain"

class InvalidFormatOfLandingUrl(ConfigurationError):
    error_code = "invalid_landing_url"

class InvalidIconSet(ConfigurationError):
    error_code = "invalid_icon_set"

class InvalidAuthenticationToken(PushPackageError):
    error_code = "invalid_authentication_token"


# ---- filesystem ----

class PackageFilesystemError(PushPackageError):
    error_code = "package_filesystem_error"

class CanNotCreateTemporaryPackageDir(PackageFilesystemError):
    error_code = "cannot_create_package_dir"

class CanNotCreateDirForIconSet(PackageFilesystemError):
    error_code = "cannot_create_iconset_dir"

class CanNotCopyIcon(PackageFilesystemError):
    error_code = "cannot_copy_icon"

class CanNotSaveWebsiteJsonToPackage(PackageFilesystemError):
    error_code = "cannot_save_website_json"

class CanNotCopyWebsiteJsonToPackage(PackageFilesystemError):
    error_code = "cannot_copy_website_json"

class CanNotSaveManifestJsonFile(PackageFilesystemError):
    error_code = "cannot_save_manifest"


# ---- hashing / encoding ----

class ManifestError(PushPackageError):
    error_code = "manifest_error"

class CanNotCalculateSha1FromFile(ManifestError):
    error_code = "cannot_calculate_sha1"

class EncodingError(PushPackageError):
    error_code = "encoding_error"

class CanNotEncodeWebsiteToJson(EncodingError):
    error_code = "cannot_encode_website"

class CanNotEncodeManifestDataToJson(EncodingError):
    error_code = "cannot_encode_manifest"


# ---- credentials ----

class CredentialError(PushPackageError):
    error_code = "credential_error"

class CanNotGetCertificateContent(CredentialError):
    error_code = "cannot_read_certificate_file"

class CanNotReadCertificateData(CredentialError):
    error_code = "cannot_decrypt_certificate"

class CanNotGetResourceFromOpenedCertificate(CredentialError):
    error_code = "certificate_missing"

class CanNotGetPrivateKeyFromOpenedCertificate(CredentialError):
    error_code = "private_key_missing"

class CanNotReadIntermediateCertificate(CredentialError):
    error_code = "cannot_read_intermediate_certificate"


# ---- signing / signature format ----

class SigningError(PushPackageError):
    error_code = "signing_error"

class CanNotSignManifest(SigningError):
    error_code = "cannot_sign_manifest"

class SignatureFormatError(PushPackageError):
    error_code = "signature_format_error"

class CanNotReadPemSignatureFromFile(SignatureFormatError):
    error_code = "cannot_read_pem_signature"

class UnexpectedContentOfPemSignature(SignatureFormatError):
    error_code = "unexpected_pem_signature"

class CanNotCreateDerSignatureByDecodingToBase64(SignatureFormatError):
    error_code = "cannot_decode_signature"

class CanNotSaveDerSignatureToFile(SignatureFormatError):
    error_code = "cannot_save_der_signature"


# ---- archive ----

class ArchiveError(PushPackageError):
    error_code = "archive_error"

class CanNotCreateZipArchive(ArchiveError):
    error_code = "cannot_create_zip"

class CanNotAddFileToZipArchive(ArchiveError):
    error_code = "cannot_add_to_zip"

class CanNotCloseZipArchive(ArchiveError):
    error_code = "cannot_close_zip"


# ---- push payload ----

class PushPayloadError(PushPackageError):
    error_code = "invalid_push_payload"

class MissingPushTitle(PushPayloadError):
    error_code = "missing_title"

class MissingPushText(PushPayloadError):
    error_code = "missing_text"

class InvalidNumberOfUrlArguments(PushPayloadError):
    error_code = "invalid_number_of_arguments"

class PushPayloadTooLong(PushPayloadError):
    error_code = "payload_too_long"

class CanNotEncodePushPayloadToJson(EncodingError):
    error_code = "cannot_encode_push_payload"
