import base64
import binascii
import os
import secrets
from typing import Optional

from fastapi import Header, HTTPException


def is_admin_authorized(authorization: Optional[str]) -> bool:
    """校验 HTTP Basic 凭据；未配置 ADMIN_USER 时一律拒绝"""
    expected_user = os.getenv("ADMIN_USER", "")
    expected_pass = os.getenv("ADMIN_PASS", "")
    if not expected_user:
        return False

    header = authorization or ""
    if not header.startswith("Basic "):
        return False
    try:
        raw = base64.b64decode(header[6:].strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return False
    user, _, password = raw.partition(":")
    user_ok = secrets.compare_digest(user.encode("utf-8"), expected_user.encode("utf-8"))
    pass_ok = secrets.compare_digest(password.encode("utf-8"), expected_pass.encode("utf-8"))
    return user_ok and pass_ok


def require_admin(authorization: Optional[str] = Header(None, alias="Authorization")) -> None:
    if not is_admin_authorized(authorization):
        raise HTTPException(status_code=401, detail="Unauthorized")
