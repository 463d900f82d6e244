from fastapi import APIRouter, Depends
from typing import List

from fridgy.dependencies import get_current_user
from fridgy.models.user import CurrentUser
from fridgy.schemas.notification import IncomingMessage
from fridgy.schemas.result import Result
from fridgy.services.messaging_service import LocalNotification, route_incoming_message

router = APIRouter()


@router.post("/route", response_model=Result[List[LocalNotification]])
async def route_message(
    message: IncomingMessage,
    current_user: CurrentUser = Depends(get_current_user),
):
    """Show which local notifications a received push would produce on the client."""
    return Result.successful(data=route_incoming_message(message.notification, message.data))
