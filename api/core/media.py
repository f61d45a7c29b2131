"""
Cloudinary HTTP client helpers (media store).

Used endpoints:
- POST /v1_1/{cloud}/image/upload   -> {"secure_url": "...", "public_id": "..."}
- POST /v1_1/{cloud}/image/destroy  -> {"result": "ok" | "not found"}

Requests are signed: sha1 over the sorted signable params followed by the API secret.
"""

from __future__ import annotations

import hashlib
import time
from dataclasses import dataclass
from typing import Any

import httpx

from . import config

DEFAULT_FOLDER = "fashion-hub"
# Fit within 800x600, automatic quality, re-encode as jpg.
UPLOAD_TRANSFORMATION = "c_limit,h_600,w_800/q_auto/f_jpg"

# Params Cloudinary excludes from the signature.
_UNSIGNED_PARAMS = {"file", "api_key", "resource_type", "cloud_name"}


# Media store failures are explicit and separable from other runtime errors.
class MediaStoreError(RuntimeError):
    pass


@dataclass(frozen=True)
class MediaCredentials:
    cloud_name: str
    api_key: str
    api_secret: str


@dataclass(frozen=True)
class UploadedImage:
    url: str
    public_id: str


def credentials() -> MediaCredentials:
    creds = MediaCredentials(
        cloud_name=config.env_str("CLOUDINARY_CLOUD_NAME"),
        api_key=config.env_str("CLOUDINARY_API_KEY"),
        api_secret=config.env_str("CLOUDINARY_API_SECRET"),
    )
    if not (creds.cloud_name and creds.api_key and creds.api_secret):
        raise MediaStoreError("Cloudinary credentials are not configured.")
    return creds


def upload_folder() -> str:
    return config.env_str("CLOUDINARY_FOLDER", DEFAULT_FOLDER)


def api_base_url(cloud_name: str) -> str:
    return f"https://api.cloudinary.com/v1_1/{cloud_name}"


def sign_params(params: dict[str, Any], api_secret: str) -> str:
    signable = sorted(
        (k, v) for k, v in params.items() if k not in _UNSIGNED_PARAMS and v not in (None, "")
    )
    to_sign = "&".join(f"{k}={v}" for k, v in signable)
    return hashlib.sha1((to_sign + api_secret).encode("utf-8")).hexdigest()


def _signed_form(params: dict[str, Any], creds: MediaCredentials) -> dict[str, str]:
    form = {k: str(v) for k, v in params.items()}
    form["timestamp"] = str(int(time.time()))
    form["signature"] = sign_params(form, creds.api_secret)
    form["api_key"] = creds.api_key
    return form


async def upload_image(
    data: bytes,
    *,
    filename: str,
    content_type: str,
    folder: str | None = None,
    timeout_s: float = 60.0,
) -> UploadedImage:
    """
    Upload raw image bytes and return the hosted URL + public id.
    """
    if not data:
        raise MediaStoreError("Image payload is empty.")

    creds = credentials()
    form = _signed_form(
        {"folder": folder or upload_folder(), "transformation": UPLOAD_TRANSFORMATION},
        creds,
    )

    try:
        async with httpx.AsyncClient(base_url=api_base_url(creds.cloud_name), timeout=timeout_s) as client:
            resp = await client.post(
                "/image/upload",
                data=form,
                files={"file": (filename or "upload", data, content_type)},
            )
    except httpx.HTTPError as exc:
        raise MediaStoreError(f"Cloudinary upload call failed: {exc}") from exc

    if resp.status_code != 200:
        # Avoid dumping huge bodies; include a small snippet.
        raise MediaStoreError(f"Cloudinary upload failed: {resp.status_code} {resp.text[:500]}")

    payload: dict[str, Any] = resp.json()
    url = str(payload.get("secure_url") or "").strip()
    public_id = str(payload.get("public_id") or "").strip()
    if not url or not public_id:
        raise MediaStoreError("Cloudinary returned no secure_url/public_id.")
    return UploadedImage(url=url, public_id=public_id)


async def destroy_image(public_id: str, *, timeout_s: float = 30.0) -> bool:
    """
    Delete a hosted image. Returns False when Cloudinary reports it missing.
    """
    public_id = (public_id or "").strip()
    if not public_id:
        raise MediaStoreError("public_id is empty.")

    creds = credentials()
    form = _signed_form({"public_id": public_id}, creds)

    try:
        async with httpx.AsyncClient(base_url=api_base_url(creds.cloud_name), timeout=timeout_s) as client:
            resp = await client.post("/image/destroy", data=form)
    except httpx.HTTPError as exc:
        raise MediaStoreError(f"Cloudinary destroy call failed: {exc}") from exc

    if resp.status_code != 200:
        raise MediaStoreError(f"Cloudinary destroy failed: {resp.status_code} {resp.text[:500]}")

    return str(resp.json().get("result") or "") == "ok"
