import logging, tempfile
from typing import Any, Callable, Optional, Sequence, Union

from pushpkg import errors
from pushpkg.config import PushPackageConfig, IconSet
from pushpkg.crypto.manifest import compute_manifest, encode_json_object
from pushpkg.layout import DEFAULT_TOKEN_PREFIX, MIN_TOKEN_LENGTH, URL_PLACEHOLDER
from pushpkg.package import assembler
from pushpkg.package.payload import build_push_payload
from pushpkg.schemas.website import WebsiteDescriptor
from pushpkg.security.signing import sign

logger = logging.getLogger(__name__)


def pad_authentication_token(token: str, prefix: str = DEFAULT_TOKEN_PREFIX, min_length: int = MIN_TOKEN_LENGTH) -> str:
    """
    Safari refuses tokens shorter than 16 characters. Short tokens get the
    prefix prepended (repeatedly, for a short custom prefix) so the original
    token stays the suffix; long enough tokens pass through untouched.
    """
    if not token:
        raise errors.InvalidAuthenticationToken("user authentication token must not be empty")
    if not prefix:
        raise errors.InvalidAuthenticationToken("token prefix must not be empty")
    while len(token) < min_length:
        token = prefix + token
    return token


def build_push_package(temporary_dir: str, stage: Callable[[str], None],
                       certificate_path: str, certificate_password: str,
                       intermediate_certificate_path: Optional[str] = None) -> str:
    """
    staging dir -> stage(icons + website.json) -> manifest.json -> signature -> zip.
    Returns the archive path. Staging dirs are left for the owner to reap.
    """
    staging_dir = assembler.create_staging_directory(temporary_dir)
    stage(staging_dir)
    compute_manifest(staging_dir)
    sign(staging_dir, certificate_path, certificate_password, intermediate_certificate_path)
    zip_path = assembler.archive(staging_dir)
    logger.info("push package built: %s", zip_path)
    return zip_path


class PushPackage:
    """Fully configured package: website.json is generated per user token."""

    def __init__(self, config: PushPackageConfig):
        self.config = config

    @property
    def website_push_id(self) -> str:
        return self.config.website_push_id

    def count_of_expected_arguments(self) -> int:
        return self.config.url_format_string.count(URL_PLACEHOLDER)

    def push_payload(self, title: str, text: str, url_args: Union[str, Sequence[Any], None] = None,
                     button_text: str = "") -> bytes:
        """Notification payload whose url-args fill this package's landing URL template."""
        return build_push_payload(title, text, url_args, button_text, self.count_of_expected_arguments())

    def website_descriptor(self, user_authentication_token: str) -> WebsiteDescriptor:
        c = self.config
        return WebsiteDescriptor(
            website_name=c.website_name,
            website_push_id=c.website_push_id,
            allowed_domains=list(c.allowed_domains),
            url_format_string=c.url_format_string,
            authentication_token=pad_authentication_token(user_authentication_token, c.token_prefix),
            web_service_url=c.web_service_url,
        )

    def website_json(self, user_authentication_token: str) -> bytes:
        website = self.website_descriptor(user_authentication_token).to_json_dict()
        try:
            return encode_json_object(website)
        except (TypeError, ValueError) as e:
            raise errors.CanNotEncodeWebsiteToJson(f"Can not encode website data to JSON: {website!r}") from e

    def create_push_package(self, user_authentication_token: str) -> str:
        website_json = self.website_json(user_authentication_token)
        c = self.config
        icons = c.icons.paths()
        return build_push_package(
            c.temporary_dir,
            lambda staging_dir: assembler.stage_files(staging_dir, icons, website_json),
            c.certificate_path,
            c.certificate_password,
            c.intermediate_certificate_path,
        )


class PrebuiltPushPackage:
    """
    Package around an existing website.json; credentials come with each
    build instead of living in the configuration.
    """

    def __init__(self, website_json_path: str, icons: IconSet, temporary_dir: Optional[str] = None):
        self.website_json_path = website_json_path
        self.icons = icons
        self.temporary_dir = temporary_dir or tempfile.gettempdir()

    def create_push_package(self, certificate_path: str, certificate_password: str,
                            intermediate_certificate_path: Optional[str] = None) -> str:
        icons = self.icons.paths()
        return build_push_package(
            self.temporary_dir,
            lambda staging_dir: assembler.stage_prebuilt_files(staging_dir, icons, self.website_json_path),
            certificate_path,
            certificate_password,
            intermediate_certificate_path,
        )
