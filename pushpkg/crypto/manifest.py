import os, json, hashlib, logging
from typing import Dict, Iterable

from pushpkg import errors
from pushpkg.layout import REQUIRED_FILES, MANIFEST_JSON

logger = logging.getLogger(__name__)

CHUNK = 64 * 1024


def sha1_file(path: str) -> str:
    h = hashlib.sha1()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(CHUNK), b""):
            h.update(chunk)
    return h.hexdigest()


def encode_json_object(obj: Dict[str, str]) -> bytes:
    # Safari needs a JSON object here even for a single entry
    if not isinstance(obj, dict):
        raise TypeError(f"expected a mapping, got {type(obj).__name__}")
    return json.dumps(obj, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def compute_manifest(staging_dir: str, names: Iterable[str] = REQUIRED_FILES) -> Dict[str, str]:
    """
    Hash every required file of a staged package and write manifest.json.
    Returns { relative_name: sha1_hex } in package order.
    """
    manifest: Dict[str, str] = {}
    for name in names:
        full = os.path.join(staging_dir, name)
        try:
            digest = sha1_file(full)
        except OSError as e:
            raise errors.CanNotCalculateSha1FromFile(f"Can not calculate SHA1 from {full}: {e}", path=full) from e
        if not digest:
            raise errors.CanNotCalculateSha1FromFile(f"Can not calculate SHA1 from {full}", path=full)
        manifest[name] = digest

    try:
        encoded = encode_json_object(manifest)
    except (TypeError, ValueError) as e:
        raise errors.CanNotEncodeManifestDataToJson(f"Can not encode manifest data to JSON: {manifest!r}") from e

    out = os.path.join(staging_dir, MANIFEST_JSON)
    try:
        with open(out, "wb") as f:
            f.write(encoded)
    except OSError as e:
        raise errors.CanNotSaveManifestJsonFile(f"Can not save manifest to {out}: {e}", path=out) from e

    logger.debug("manifest written: %s (%d entries)", out, len(manifest))
    return manifest
