"""Fixed file layout of a Safari push package."""

ICONSET_DIR = "icon.iconset"

# field name on IconSet -> file name inside icon.iconset/
ICON_FILES = {
    "icon_16x16": "icon_16x16.png",
    "icon_16x16_2x": "icon_16x16@2x.png",
    "icon_32x32": "icon_32x32.png",
    "icon_32x32_2x": "icon_32x32@2x.png",
    "icon_128x128": "icon_128x128.png",
    "icon_128x128_2x": "icon_128x128@2x.png",
}

WEBSITE_JSON = "website.json"
MANIFEST_JSON = "manifest.json"
SIGNATURE = "signature"

REQUIRED_FILES = tuple(f"{ICONSET_DIR}/{name}" for name in ICON_FILES.values()) + (WEBSITE_JSON,)

ARCHIVE_ENTRIES = REQUIRED_FILES + (MANIFEST_JSON, SIGNATURE)

STAGING_PREFIX = "pushPackage"

# Safari rejects authentication tokens shorter than this
MIN_TOKEN_LENGTH = 16
DEFAULT_TOKEN_PREFIX = "authentication_token_"

URL_PLACEHOLDER = "%@"

# Safari notification payloads larger than this are refused by APNs
MAX_PUSH_PAYLOAD_BYTES = 256
