"""Greeting endpoints, handy as smoke tests for a freshly started server."""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from kennel.schemas.record import MessageResponse

router = APIRouter(tags=["Root"])


@router.get("/", response_model=MessageResponse, summary="Greeting")
async def root() -> MessageResponse:
    return MessageResponse(message="hello world!")


@router.get("/hello", response_class=PlainTextResponse, summary="Plain-text greeting")
async def hello() -> str:
    return "hello lambda!"
