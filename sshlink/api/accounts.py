from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool

from sshlink.api.routes import encode_profile, link_payload
from sshlink.core.config import Settings, get_settings
from sshlink.core.database import get_db
from sshlink.models.connection_profile import ConnectionProfile
from sshlink.services.accounts import allocate_username, expiry_after, generate_password
from sshlink.services.errors import InvalidField

router = APIRouter(prefix="/api/accounts", tags=["accounts"])


class AccountRequest(BaseModel):
    days: Optional[int] = Field(default=None, ge=1, le=3650)


@router.post("")
async def create_account(
    body: AccountRequest,
    db=Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Pick credentials for a new account and build one link per configured port.

    The OS account is not created here; the caller runs useradd with the
    returned username, password and expiry date.
    """
    days = body.days or settings.default_days

    try:
        username = await run_in_threadpool(allocate_username, db, settings.prefix)
    except SQLAlchemyError as e:
        print(f"✗ Error allocating username: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error allocating username: {str(e)}"
        )

    password = generate_password()
    expiry_date = expiry_after(days)

    links = []
    for port in settings.ports:
        try:
            profile = ConnectionProfile(
                server_address=settings.server_address,
                port=port,
                username=username,
                password=password,
                location=settings.location,
                expiry_date=expiry_date,
            )
        except InvalidField as e:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
        link = await encode_profile(profile)
        links.append({"port": port, **link_payload(link)})

    print(f"✓ Prepared account '{username}' (expires {expiry_date}, {len(links)} link(s))")

    return {
        "username": username,
        "password": password,
        "expiry_date": expiry_date,
        "links": links,
    }
