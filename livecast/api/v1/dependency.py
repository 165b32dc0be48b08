from typing import Annotated

from fastapi import Depends, Header
from loguru import logger
from pydantic import BaseModel

from livecast.app_config import get_app_environ_config


class Owner(BaseModel):
    owner_id: str


async def get_current_owner(x_owner_id: str | None = Header(default=None)) -> Owner:
    # Credentials are handled upstream; without a principal header every request
    # belongs to the shared default owner.
    owner_id = (x_owner_id or "").strip() or get_app_environ_config().DEFAULT_OWNER_ID
    logger.debug("Request owner_id: {}", owner_id)
    return Owner(owner_id=owner_id)


CurrentOwner = Annotated[Owner, Depends(get_current_owner)]
