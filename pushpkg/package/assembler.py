import os, time, uuid, shutil, zipfile, logging, contextlib
from typing import Dict, List, Optional

from pushpkg import errors
from pushpkg.layout import ICONSET_DIR, WEBSITE_JSON, ARCHIVE_ENTRIES, STAGING_PREFIX

logger = logging.getLogger(__name__)


def create_staging_directory(temp_root: str) -> str:
    # uuid4 keeps concurrent builds (threads or processes) apart
    path = os.path.join(temp_root, f"{STAGING_PREFIX}{uuid.uuid4().hex}")
    try:
        os.mkdir(path)
    except OSError as e:
        if not os.path.isdir(path):
            raise errors.CanNotCreateTemporaryPackageDir(f"Failed to create temporary dir {path}: {e}", path=path) from e
    logger.debug("staging dir %s", path)
    return path


def stage_icons(staging_dir: str, icon_paths: Dict[str, str]) -> None:
    iconset = os.path.join(staging_dir, ICONSET_DIR)
    try:
        os.mkdir(iconset)
    except OSError as e:
        if not os.path.isdir(iconset):
            raise errors.CanNotCreateDirForIconSet(f"Can not create dir {iconset}: {e}", path=iconset) from e
    for name, src in icon_paths.items():
        dst = os.path.join(iconset, name)
        try:
            shutil.copyfile(src, dst)
        except OSError as e:
            raise errors.CanNotCopyIcon(f"Can not copy icon {src} to {dst}: {e}", path=src) from e


def write_website_json(staging_dir: str, website_json: bytes) -> None:
    dst = os.path.join(staging_dir, WEBSITE_JSON)
    try:
        with open(dst, "wb") as f:
            f.write(website_json)
    except OSError as e:
        raise errors.CanNotSaveWebsiteJsonToPackage(f"Can not save website.json to {dst}: {e}", path=dst) from e


def copy_website_json(staging_dir: str, src: str) -> None:
    dst = os.path.join(staging_dir, WEBSITE_JSON)
    try:
        shutil.copyfile(src, dst)
    except OSError as e:
        raise errors.CanNotCopyWebsiteJsonToPackage(f"Can not copy {src} to {dst}: {e}", path=src) from e


def stage_files(staging_dir: str, icon_paths: Dict[str, str], website_json: bytes) -> None:
    stage_icons(staging_dir, icon_paths)
    write_website_json(staging_dir, website_json)


def stage_prebuilt_files(staging_dir: str, icon_paths: Dict[str, str], website_json_path: str) -> None:
    stage_icons(staging_dir, icon_paths)
    copy_website_json(staging_dir, website_json_path)


def _discard(path: str) -> None:
    with contextlib.suppress(OSError):
        os.remove(path)


def archive(staging_dir: str) -> str:
    """
    Zip a signed staging dir into <staging_dir>.zip. Entries are stored
    under their package-relative names in ARCHIVE_ENTRIES order.
    A failed archive is removed, never handed back.
    """
    zip_path = f"{staging_dir.rstrip(os.sep)}.zip"
    try:
        zf = zipfile.ZipFile(zip_path, "w", zipfile.ZIP_DEFLATED)
    except OSError as e:
        raise errors.CanNotCreateZipArchive(f"Could not create {zip_path}: {e}", path=zip_path) from e

    try:
        for name in ARCHIVE_ENTRIES:
            src = os.path.join(staging_dir, name)
            try:
                zf.write(src, arcname=name)
            except OSError as e:
                raise errors.CanNotAddFileToZipArchive(f"Can not add {src} to ZIP archive", path=src) from e
    except errors.CanNotAddFileToZipArchive:
        with contextlib.suppress(OSError):
            zf.close()
        _discard(zip_path)
        raise

    try:
        zf.close()
    except OSError as e:
        _discard(zip_path)
        raise errors.CanNotCloseZipArchive(f"Can not close ZIP archive {zip_path}: {e}", path=zip_path) from e
    return zip_path


def reap_staging(temp_root: str, max_age_seconds: float, now: Optional[float] = None) -> List[str]:
    """
    Delete staging dirs and archives under temp_root older than max_age_seconds.
    The build pipeline never calls this; whoever owns temp_root schedules it.
    """
    now = time.time() if now is None else now
    removed: List[str] = []
    try:
        names = sorted(os.listdir(temp_root))
    except OSError as e:
        logger.warning("can not list %s: %s", temp_root, e)
        return removed
    for name in names:
        if not name.startswith(STAGING_PREFIX):
            continue
        path = os.path.join(temp_root, name)
        try:
            if now - os.path.getmtime(path) < max_age_seconds:
                continue
            if os.path.isdir(path):
                shutil.rmtree(path)
            elif name.endswith(".zip"):
                os.remove(path)
            else:
                continue
        except OSError as e:
            logger.warning("can not reap %s: %s", path, e)
            continue
        removed.append(path)
    return removed
