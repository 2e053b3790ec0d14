from __future__ import annotations

from fastapi import APIRouter, Depends

from sessionkit.api.deps import get_log_sink
from sessionkit.schemas.requests import ClientLogRequest
from sessionkit.schemas.responses import MessageResponse
from sessionkit.services.log_sink import ClientLogSink

router = APIRouter()


@router.post("/log", response_model=MessageResponse)
def receive_log(
    body: ClientLogRequest,
    sink: ClientLogSink = Depends(get_log_sink),
) -> MessageResponse:
    sink.write(body)
    return MessageResponse(message="Log received")
