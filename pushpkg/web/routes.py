import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, FastAPI, Header, HTTPException
from fastapi.responses import FileResponse, Response
from pydantic import ValidationError

from pushpkg.config import config_from_env
from pushpkg.errors import PushPackageError, PushPayloadError
from pushpkg.package.push_package import PushPackage
from pushpkg.schemas.callbacks import LogRequest
from pushpkg.web.store import DeviceLookup, DeviceStore, LogSink, PushSender

logger = logging.getLogger(__name__)

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, must-revalidate",
    "Expires": "Thu, 01 Jan 1970 00:00:01 GMT",
}

AUTH_SCHEME = "ApplePushNotifications"


def _auth_token(authorization: Optional[str]) -> str:
    token = (authorization or "").strip()
    if token[:len(AUTH_SCHEME)].lower() == AUTH_SCHEME.lower():
        token = token[len(AUTH_SCHEME):].strip()
    if not token:
        raise HTTPException(status_code=401, detail="missing_authentication_token")
    return token


def build_router(push_package: PushPackage, device_store: Optional[DeviceStore] = None,
                 log_sink: Optional[LogSink] = None, device_lookup: Optional[DeviceLookup] = None,
                 push_sender: Optional[PushSender] = None) -> APIRouter:
    """
    Endpoints Safari calls on {webServiceURL}. Device routes exist only with
    a device_store, the log route only with a log_sink. POST /push, the
    publisher side, needs both device_lookup and push_sender.
    """
    router = APIRouter(tags=["safari-push"])

    def _check_push_id(website_push_id: str) -> None:
        if website_push_id != push_package.website_push_id:
            raise HTTPException(status_code=403, detail="invalid_website_push_id")

    @router.post("/v{version}/pushPackages/{website_push_id}")
    def push_packages(version: int, website_push_id: str, payload: Optional[Dict[str, Any]] = Body(default=None)):
        _check_push_id(website_push_id)
        token = str((payload or {}).get("id") or "").strip()
        if not token:
            raise HTTPException(status_code=400, detail="missing_parameter_id")
        try:
            zip_path = push_package.create_push_package(token)
        except PushPackageError as e:
            logger.exception("push package build failed for %s", website_push_id)
            raise HTTPException(status_code=500, detail=e.error_code) from e
        return FileResponse(zip_path, media_type="application/zip", headers=NO_CACHE_HEADERS)

    if device_store is not None:
        path = "/v{version}/devices/{device_token}/registrations/{website_push_id}"

        @router.post(path)
        def register_device(version: int, device_token: str, website_push_id: str,
                            authorization: Optional[str] = Header(default=None)):
            token = _auth_token(authorization)
            _check_push_id(website_push_id)
            device_store.add_device(token, device_token)
            return Response(status_code=200)

        @router.delete(path)
        def delete_device(version: int, device_token: str, website_push_id: str,
                          authorization: Optional[str] = Header(default=None)):
            token = _auth_token(authorization)
            _check_push_id(website_push_id)
            device_store.delete_device(token, device_token)
            return Response(status_code=200)

    if log_sink is not None:

        @router.post("/v{version}/log")
        def log(version: int, payload: Optional[Dict[str, Any]] = Body(default=None)):
            try:
                req = LogRequest.model_validate(payload or {})
            except ValidationError as e:
                raise HTTPException(status_code=400, detail="missing_logs") from e
            for line in req.logs:
                logger.warning("safari reported: %s", line)
            log_sink(req.logs)
            return Response(status_code=200)

    if device_lookup is not None and push_sender is not None:

        @router.post("/push")
        def push(payload: Optional[Dict[str, Any]] = Body(default=None)):
            body = payload or {}
            token = str(body.get("user-authentication-token") or "").strip()
            try:
                data = push_package.push_payload(
                    str(body.get("title") or ""),
                    str(body.get("text") or ""),
                    body.get("arguments"),
                    str(body.get("button-text") or ""),
                )
            except PushPayloadError as e:
                raise HTTPException(status_code=400, detail=e.error_code) from e
            if not token:
                raise HTTPException(status_code=400, detail="missing_user_authentication_token")
            device_token = device_lookup(token)
            if not device_token:
                raise HTTPException(status_code=404, detail="device_not_found")
            push_sender(data, device_token.replace(" ", ""))
            return Response(status_code=200)

    return router


def create_app(push_package: Optional[PushPackage] = None, device_store: Optional[DeviceStore] = None,
               log_sink: Optional[LogSink] = None, device_lookup: Optional[DeviceLookup] = None,
               push_sender: Optional[PushSender] = None) -> FastAPI:
    app = FastAPI(title="Safari push package service")
    if push_package is None:
        push_package = PushPackage(config_from_env())
    app.include_router(build_router(push_package, device_store, log_sink, device_lookup, push_sender))

    @app.get("/health")
    def health():
        return {"ok": True}

    return app
