import json
from typing import Any, Dict, List, Optional, Sequence, Union

from pushpkg import errors
from pushpkg.layout import MAX_PUSH_PAYLOAD_BYTES


def split_url_arguments(url_args: Union[str, Sequence[Any], None]) -> List[str]:
    """A comma separated string or a list; None means no arguments."""
    if url_args is None:
        return []
    if isinstance(url_args, str):
        return url_args.split(",") if url_args else []
    if not isinstance(url_args, Sequence) or isinstance(url_args, bytes):
        raise errors.InvalidNumberOfUrlArguments(f"URL arguments must be a list or a comma separated string, got {type(url_args).__name__}")
    return [str(a) for a in url_args]


def build_push_payload(title: str, text: str, url_args: Union[str, Sequence[Any], None] = None,
                       button_text: str = "", expected_arguments: Optional[int] = None) -> bytes:
    """
    APNs payload for a Safari notification:

        {"aps": {"alert": {"title": ..., "body": ..., "action": ...}}, "url-args": [...]}

    An empty action lets macOS use its default button label.
    """
    title = (title or "").strip()
    if not title:
        raise errors.MissingPushTitle("push notification title must not be empty")
    text = (text or "").strip()
    if not text:
        raise errors.MissingPushText("push notification text must not be empty")

    args = split_url_arguments(url_args)
    if expected_arguments is not None and len(args) != expected_arguments:
        raise errors.InvalidNumberOfUrlArguments(
            f"landing URL expects {expected_arguments} arguments, got {len(args)}")

    payload: Dict[str, Any] = {
        "aps": {"alert": {"title": title, "body": text, "action": (button_text or "").strip()}},
        "url-args": args,
    }
    try:
        data = json.dumps(payload, ensure_ascii=False, separators=(",", ":"), allow_nan=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise errors.CanNotEncodePushPayloadToJson(f"Can not encode to JSON a payload {payload!r}") from e
    if len(data) > MAX_PUSH_PAYLOAD_BYTES:
        raise errors.PushPayloadTooLong(
            f"push payload is {len(data)} bytes, at most {MAX_PUSH_PAYLOAD_BYTES} are accepted")
    return data
