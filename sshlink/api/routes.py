import base64
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from sshlink.core.config import Settings, get_settings
from sshlink.models.connection_profile import ConnectionProfile
from sshlink.services.accounts import InvalidExpiryDate, normalize_expiry_date
from sshlink.services.errors import (
    InvalidField,
    LinkEncodingError,
    PayloadTooLarge,
)
from sshlink.services.link_encoder import ConnectionLink, build_connection_link

router = APIRouter(prefix="/api")


class ProfileRequest(BaseModel):
    username: str
    password: str
    expiry_date: str
    server_address: Optional[str] = None
    port: Optional[int] = None
    location: Optional[str] = None


def link_error_status(error: LinkEncodingError) -> int:
    if isinstance(error, InvalidField):
        return status.HTTP_422_UNPROCESSABLE_ENTITY
    if isinstance(error, PayloadTooLarge):
        return status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def link_payload(link: ConnectionLink) -> dict:
    return {
        "uri": link.uri,
        "qr_png_base64": base64.b64encode(link.qr.png).decode(),
        "width": link.qr.width,
        "height": link.qr.height,
    }


async def encode_profile(profile: ConnectionProfile) -> ConnectionLink:
    """Run the encoder off the event loop and map its failures to HTTP errors."""
    try:
        link = await run_in_threadpool(build_connection_link, profile)
    except LinkEncodingError as e:
        print(f"✗ Link for '{profile.username}' failed at {e.stage}: {e.message}")
        raise HTTPException(status_code=link_error_status(e), detail=e.message)
    print(f"✓ Built link for '{profile.username}' ({len(link.uri)} chars, {len(link.qr.png)} byte QR)")
    return link


def profile_from_request(body: ProfileRequest, settings: Settings) -> ConnectionProfile:
    try:
        return ConnectionProfile(
            server_address=body.server_address if body.server_address is not None else settings.server_address,
            port=body.port if body.port is not None else settings.ports[0],
            username=body.username,
            password=body.password,
            location=body.location if body.location is not None else settings.location,
            expiry_date=normalize_expiry_date(body.expiry_date),
        )
    except (InvalidField, InvalidExpiryDate) as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))


@router.get("/health")
async def health():
    return {"status": "ok"}


@router.post("/links")
async def create_link(body: ProfileRequest, settings: Settings = Depends(get_settings)):
    """Encode a profile and return the link together with its QR code."""
    link = await encode_profile(profile_from_request(body, settings))
    return link_payload(link)


@router.post("/links/qr")
async def create_link_qr(body: ProfileRequest, settings: Settings = Depends(get_settings)):
    link = await encode_profile(profile_from_request(body, settings))
    return Response(
        content=link.qr.png,
        media_type="image/png",
        headers={"X-Connection-Link": link.uri},
    )
