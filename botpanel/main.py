#!/usr/bin/env python3
"""
botpanel - Main Entry Point

This is the thin orchestration layer that:
1. Loads configuration
2. Initializes modules (session registry, guild and profile operations)
3. Routes each HTTP request to exactly one module operation

All Discord logic is in the modules, following black box principles.
"""

import logging
import logging.config as log_config
import os
from contextlib import asynccontextmanager
from functools import partial
from typing import Optional

import discord
import uvicorn
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from botpanel import __version__
from botpanel.config.provider import ConfigProvider, EnvConfigProvider
from botpanel.logging_config import get_logging_config
from botpanel.modules.api import (
    AvatarRequest,
    ChannelListResponse,
    ErrorResponse,
    GuildListResponse,
    LoginRequest,
    LoginResponse,
    MessageListResponse,
    MessageSentResponse,
    NicknameRequest,
    PresenceRequest,
    SendMessageRequest,
    SuccessResponse,
    UsernameRequest,
)
from botpanel.modules.errors import BotPanelError
from botpanel.modules.guild import GuildModule
from botpanel.modules.profile import ProfileModule
from botpanel.modules.session import BotConnection, SessionRegistry
from botpanel.modules.session.registry import Connector

# Configuration provider (centralized config access)
config_provider: ConfigProvider = EnvConfigProvider()
api_config = config_provider.get_api_config()

# Configure logging with health check suppression
log_config.dictConfig(get_logging_config(api_config.log_level))
logger = logging.getLogger(__name__)


# Dependency injection helpers


def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.registry


def get_guild_module(request: Request) -> GuildModule:
    return request.app.state.guild_module


def get_profile_module(request: Request) -> ProfileModule:
    return request.app.state.profile_module


async def get_client(
    session_id: str, registry: SessionRegistry = Depends(get_registry)
) -> discord.Client:
    """Resolve the session path segment to its client, or fail with 401."""
    return registry.lookup(session_id).client


# Every failure answers {"error": message}
ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid request"},
    401: {"model": ErrorResponse, "description": "Session expired or login failed"},
    500: {"model": ErrorResponse, "description": "Discord error"},
}

router = APIRouter(prefix="/api", responses=ERROR_RESPONSES)


# Session Endpoints


@router.post("/login", response_model=LoginResponse)
async def login(
    payload: Optional[LoginRequest] = None,
    registry: SessionRegistry = Depends(get_registry),
):
    """
    Log a bot in with its token and open a session.

    Returns:
        200: Session id, bot profile and guilds (with invites where allowed)
        400: Token missing
        401: Token rejected or gateway login failed
    """
    session_id, user, guilds = await registry.create(payload.token if payload else None)
    return LoginResponse(session_id=session_id, user=user, guilds=guilds)


@router.post("/logout/{session_id}", response_model=SuccessResponse)
async def logout(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    """
    End a session. Always succeeds, even for unknown sessions.
    """
    await registry.destroy(session_id)
    return SuccessResponse()


# Guild/Channel/Message Endpoints


@router.get("/guilds/{session_id}", response_model=GuildListResponse)
async def list_guilds(
    client: discord.Client = Depends(get_client),
    guild_module: GuildModule = Depends(get_guild_module),
):
    """
    List guilds from the client cache (no invites).

    Returns:
        200: Guild summaries
        401: Session expired
    """
    return GuildListResponse(guilds=guild_module.list_guilds(client))


@router.get("/channels/{session_id}/{guild_id}", response_model=ChannelListResponse)
async def list_channels(
    guild_id: str,
    client: discord.Client = Depends(get_client),
    guild_module: GuildModule = Depends(get_guild_module),
):
    """
    List text channels where the bot can send messages.

    Returns:
        200: Channel summaries
        400: Invalid guild id
        401: Session expired
        500: Discord error
    """
    channels = await guild_module.list_sendable_channels(client, guild_id)
    return ChannelListResponse(channels=channels)


@router.get("/messages/{session_id}/{channel_id}", response_model=MessageListResponse)
async def list_messages(
    channel_id: str,
    client: discord.Client = Depends(get_client),
    guild_module: GuildModule = Depends(get_guild_module),
):
    """
    Fetch the most recent messages of a text channel, oldest first.

    Returns:
        200: Message summaries
        400: Invalid channel
        401: Session expired
        500: Discord error
    """
    messages = await guild_module.fetch_recent_messages(client, channel_id)
    return MessageListResponse(messages=messages)


@router.post("/messages/{session_id}/{channel_id}", response_model=MessageSentResponse)
async def send_message(
    channel_id: str,
    payload: Optional[SendMessageRequest] = None,
    client: discord.Client = Depends(get_client),
    guild_module: GuildModule = Depends(get_guild_module),
):
    """
    Send a message as the bot.

    Returns:
        200: Message id
        400: Empty content or invalid channel
        401: Session expired
        500: Discord error
    """
    message_id = await guild_module.send_message(
        client, channel_id, payload.content if payload else None
    )
    return MessageSentResponse(message_id=message_id)


# Profile Endpoints


@router.post("/status/{session_id}", response_model=SuccessResponse)
async def set_status(
    payload: Optional[PresenceRequest] = None,
    client: discord.Client = Depends(get_client),
    profile_module: ProfileModule = Depends(get_profile_module),
):
    """Set presence status and optional activity."""
    payload = payload or PresenceRequest()
    await profile_module.set_presence(client, payload.status, payload.activity)
    return SuccessResponse()


@router.post("/nickname/{session_id}/{guild_id}", response_model=SuccessResponse)
async def set_nickname(
    guild_id: str,
    payload: Optional[NicknameRequest] = None,
    client: discord.Client = Depends(get_client),
    profile_module: ProfileModule = Depends(get_profile_module),
):
    """
    Set the bot's nickname in one guild.

    Returns:
        200: Success
        400: Invalid guild id
        401: Session expired
        500: Discord error
    """
    await profile_module.set_nickname(client, guild_id, payload.nickname if payload else None)
    return SuccessResponse()


@router.post("/avatar/{session_id}", response_model=SuccessResponse)
async def set_avatar(
    payload: Optional[AvatarRequest] = None,
    client: discord.Client = Depends(get_client),
    profile_module: ProfileModule = Depends(get_profile_module),
):
    """Set the bot's avatar from a base64 image."""
    await profile_module.set_avatar(client, payload.avatar_base64 if payload else None)
    return SuccessResponse()


@router.post("/username/{session_id}", response_model=SuccessResponse)
async def set_username(
    payload: Optional[UsernameRequest] = None,
    client: discord.Client = Depends(get_client),
    profile_module: ProfileModule = Depends(get_profile_module),
):
    """Set the bot's global username."""
    await profile_module.set_username(client, payload.username if payload else None)
    return SuccessResponse()


@router.post("/leave/{session_id}/{guild_id}", response_model=SuccessResponse)
async def leave_guild(
    guild_id: str,
    client: discord.Client = Depends(get_client),
    profile_module: ProfileModule = Depends(get_profile_module),
):
    """
    Make the bot leave a guild.

    Returns:
        200: Success
        400: Invalid guild id
        401: Session expired
        500: Discord error
    """
    await profile_module.leave_guild(client, guild_id)
    return SuccessResponse()


# Error handlers


async def botpanel_error_handler(request: Request, exc: BotPanelError):
    """Map module errors to {"error": message} with their status code."""
    if exc.status_code >= 500:
        # Route template, so the session id never reaches the log
        route = getattr(request.scope.get("route"), "path", "unknown route")
        logger.warning(f"{request.method} {route} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Handle malformed request bodies."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        message = "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


async def unhandled_error_handler(request: Request, exc: Exception):
    """Last resort: anything the modules did not translate still answers JSON."""
    route = getattr(request.scope.get("route"), "path", "unknown route")
    logger.error(f"{request.method} {route} failed: {exc!r}", exc_info=exc)
    return JSONResponse(
        status_code=500, content={"error": str(exc) or "Internal server error"}
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


def create_app(
    provider: Optional[ConfigProvider] = None,
    connector: Optional[Connector] = None,
) -> FastAPI:
    """
    Build the FastAPI application and its modules.

    Args:
        provider: Configuration provider (environment by default)
        connector: Coroutine function turning a token into a ready BotConnection;
            defaults to a real discord.py login

    Returns:
        Configured FastAPI application
    """
    provider = provider or config_provider
    settings = provider.get_api_config()
    discord_config = provider.get_discord_config()

    guild_module = GuildModule(discord_config)
    registry = SessionRegistry(
        connector or partial(BotConnection.open, config=discord_config),
        guild_module,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Manage application lifecycle - close every live session on shutdown.
        """
        logger.info("Starting botpanel API...")

        yield

        logger.info("Shutting down botpanel API...")
        closed = await app.state.registry.close_all()
        logger.info(f"botpanel API shutdown complete ({closed} sessions closed)")

    app = FastAPI(
        title="botpanel API",
        description="botpanel - Drive a Discord bot from the browser",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.registry = registry
    app.state.guild_module = guild_module
    app.state.profile_module = ProfileModule()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(BotPanelError, botpanel_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(router, tags=["bot"])

    # Health/Monitoring Endpoints

    @app.get("/healthz")
    async def healthz():
        """
        Minimal health check endpoint for container probes.

        Returns:
            200: Service is running
        """
        return {"status": "ok"}

    @app.get("/health")
    async def health(request: Request):
        """Health check with the number of live bot sessions."""
        return {
            "status": "healthy",
            "sessions": len(request.app.state.registry),
            "version": __version__,
        }

    # Front-end last, so it never shadows the API routes
    if settings.static_dir and os.path.isdir(settings.static_dir):
        app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")
        logger.info(f"Serving front-end from {settings.static_dir}")

    return app


app = create_app()


def run() -> None:
    """Console entry point."""
    uvicorn.run(
        "botpanel.main:app",
        host=api_config.host,
        port=api_config.port,
        log_level=api_config.log_level.lower(),
        reload=api_config.debug,
        log_config=get_logging_config(api_config.log_level),
    )


if __name__ == "__main__":
    run()
