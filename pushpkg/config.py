import os, re, json, tempfile
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pushpkg import errors
from pushpkg.layout import ICON_FILES, DEFAULT_TOKEN_PREFIX

WEBSITE_PUSH_ID_RE = re.compile(r"^web(\.[\w-]+)+$")
LANDING_URL_RE = re.compile(r"^https?://")


class IconSet(BaseModel):
    """Source paths of the six icons Safari requires, no more, no fewer."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    icon_16x16: str
    icon_16x16_2x: str
    icon_32x32: str
    icon_32x32_2x: str
    icon_128x128: str
    icon_128x128_2x: str

    def paths(self) -> Dict[str, str]:
        """canonical file name -> source path, in package order"""
        return {name: getattr(self, field) for field, name in ICON_FILES.items()}

    @classmethod
    def from_mapping(cls, icons: Mapping[str, str]) -> "IconSet":
        """Accepts canonical file names (icon_16x16@2x.png) as keys."""
        by_name = {name: field for field, name in ICON_FILES.items()}
        unknown = sorted(set(icons) - set(by_name))
        missing = sorted(set(by_name) - set(icons))
        if unknown or missing:
            raise errors.InvalidIconSet(f"icon set must name exactly {sorted(by_name)}; missing={missing} unknown={unknown}")
        return cls(**{by_name[name]: str(path) for name, path in icons.items()})

    @classmethod
    def from_dir(cls, icons_dir: str) -> "IconSet":
        return cls(**{field: os.path.join(icons_dir, name) for field, name in ICON_FILES.items()})


class PushPackageConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    website_name: str
    website_push_id: str
    allowed_domains: Tuple[str, ...]
    url_format_string: str
    web_service_url: str
    icons: IconSet
    certificate_path: str
    certificate_password: str = ""
    intermediate_certificate_path: Optional[str] = None
    temporary_dir: str = Field(default_factory=tempfile.gettempdir)
    token_prefix: str = DEFAULT_TOKEN_PREFIX

    @field_validator("website_push_id")
    @classmethod
    def _check_push_id(cls, v: str) -> str:
        if not WEBSITE_PUSH_ID_RE.match(v):
            raise errors.InvalidFormatOfWebsitePushId(f"Website push ID should be in format web.com.example.foo, got {v!r}")
        return v

    @field_validator("allowed_domains", mode="before")
    @classmethod
    def _check_domains(cls, v: Any) -> Tuple[str, ...]:
        # runs before type coercion so a malformed list still gets a typed error
        if isinstance(v, (str, bytes)) or (v is not None and not isinstance(v, Sequence)):
            raise errors.AllowedDomainHasInvalidFormat(f"Allowed domains must be a list of URLs, got {type(v).__name__}")
        if not v:
            raise errors.NoAllowedDomains("At least one domain allowed to request permission from a user is required")
        for domain in v:
            if not isinstance(domain, str) or not is_absolute_url(domain):
                raise errors.AllowedDomainHasInvalidFormat(f"Allowed domain is not a valid absolute URL: {domain!r}")
        return tuple(v)

    @field_validator("url_format_string")
    @classmethod
    def _check_landing_url(cls, v: str) -> str:
        if not LANDING_URL_RE.match(v):
            raise errors.InvalidFormatOfLandingUrl(f"Landing URL has to use http or https protocol, got {v!r}")
        return v

    @field_validator("web_service_url")
    @classmethod
    def _strip_web_service_url(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("token_prefix")
    @classmethod
    def _check_token_prefix(cls, v: str) -> str:
        if not v:
            raise errors.ConfigurationError("authentication token prefix must not be empty")
        return v


def is_absolute_url(url: str) -> bool:
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    return bool(parts.scheme) and bool(parts.netloc) and " " not in url


def _split_csv(s: str) -> Tuple[str, ...]:
    return tuple(x.strip() for x in s.split(",") if x.strip())


def config_from_dict(doc: Dict[str, Any]) -> PushPackageConfig:
    doc = dict(doc)
    icons_dir = doc.pop("icons_dir", None)
    icons = doc.pop("icons", None)
    if isinstance(icons, IconSet):
        doc["icons"] = icons
    elif isinstance(icons, Mapping):
        doc["icons"] = IconSet.from_mapping(icons)
    elif icons_dir:
        doc["icons"] = IconSet.from_dir(icons_dir)
    else:
        raise errors.InvalidIconSet("either icons (name -> path) or icons_dir is required")
    if isinstance(doc.get("allowed_domains"), str):
        doc["allowed_domains"] = _split_csv(doc["allowed_domains"])
    return PushPackageConfig(**doc)


def config_from_json(path: str) -> PushPackageConfig:
    with open(path, "r", encoding="utf-8") as f:
        doc = json.load(f)
    pw = os.environ.get("PUSHPKG_CERT_PASSWORD")
    if pw is not None:
        doc["certificate_password"] = pw
    return config_from_dict(doc)


def config_from_env(env: Optional[Mapping[str, str]] = None) -> PushPackageConfig:
    env = os.environ if env is None else env
    doc: Dict[str, Any] = {
        "website_name": env.get("PUSHPKG_WEBSITE_NAME", ""),
        "website_push_id": env.get("PUSHPKG_WEBSITE_PUSH_ID", ""),
        "allowed_domains": _split_csv(env.get("PUSHPKG_ALLOWED_DOMAINS", "")),
        "url_format_string": env.get("PUSHPKG_URL_FORMAT_STRING", ""),
        "web_service_url": env.get("PUSHPKG_WEB_SERVICE_URL", ""),
        "icons_dir": env.get("PUSHPKG_ICONS_DIR", ""),
        "certificate_path": env.get("PUSHPKG_CERT_PATH", ""),
        "certificate_password": env.get("PUSHPKG_CERT_PASSWORD", ""),
        "intermediate_certificate_path": env.get("PUSHPKG_INTERMEDIATE_CERT_PATH") or None,
    }
    if env.get("PUSHPKG_TEMP_DIR"):
        doc["temporary_dir"] = env["PUSHPKG_TEMP_DIR"]
    if env.get("PUSHPKG_TOKEN_PREFIX"):
        doc["token_prefix"] = env["PUSHPKG_TOKEN_PREFIX"]
    return config_from_dict(doc)
