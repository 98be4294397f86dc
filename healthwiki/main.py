"""
Main FastAPI application for the Health Wiki Proxy.

Exposes a single POST endpoint that screens a health question and answers it
with a Wikipedia summary, keeping upstream credentials on the server.
"""

import logging
import os
from typing import Optional

import httpx
from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers
import uvicorn

from . import __version__
from .completion import CompletionClient
from .config import Settings
from .exceptions import UpstreamError
from .formatters import serialize
from .logging_config import setup_logging
from .models import ChatIn
from .pipeline import QueryPipeline
from .resolver import Resolver
from .summarizer import Summarizer
from .wikipedia import WikipediaClient

logger = logging.getLogger(__name__)


class EmptyPreflightCORSMiddleware(CORSMiddleware):
    """CORSMiddleware whose accepted preflight responses carry no body."""

    def preflight_response(self, request_headers: Headers) -> Response:
        response = super().preflight_response(request_headers)
        if response.status_code != status.HTTP_200_OK:
            return response
        headers = {
            key: value for key, value in response.headers.items()
            if key not in ("content-length", "content-type")
        }
        return Response(status_code=status.HTTP_200_OK, headers=headers)


def build_pipeline(settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> QueryPipeline:
    """
    Wire the pipeline from settings.

    Args:
        settings (Settings): Validated settings
        transport (httpx.AsyncBaseTransport, optional): Shared transport for outbound calls

    Returns:
        QueryPipeline: Ready-to-use pipeline
    """
    wiki = WikipediaClient(
        settings.wiki_api_url,
        extract_chars=settings.extract_chars,
        timeout=settings.http_timeout,
        transport=transport,
    )

    completion = None
    if settings.completion_fallback:
        completion = CompletionClient(
            settings.openai_api_key,
            api_url=settings.openai_api_url,
            model=settings.openai_model,
            temperature=settings.openai_temperature,
            max_tokens=settings.openai_max_tokens,
            system_prompt=settings.system_prompt,
            timeout=settings.http_timeout,
            transport=transport,
        )

    return QueryPipeline(
        Resolver(wiki, root_title=settings.wiki_root_title),
        Summarizer(wiki, article_base_url=settings.wiki_article_url),
        completion=completion,
        log_secret=settings.app_secret,
    )


def _friendly_validation_message(error: dict) -> str:
    """Convert a Pydantic error entry into a message for the user."""
    error_type = error.get('type', '')
    loc = error.get('loc', ())
    field = str(loc[-1]) if loc else 'body'
    message = error.get('msg', 'Invalid input')

    if error_type == 'json_invalid':
        return "Request body must be valid JSON"
    if field == 'body':
        return "Request body must be a JSON object with a 'prompt' field"
    if error_type == 'missing':
        return f"Missing required field: {field}"
    if error_type == 'string_type':
        return f"{field.title()} must be a string"
    if message.startswith('Value error, '):
        return message[len('Value error, '):]
    return message


def create_app(settings: Optional[Settings] = None, transport: Optional[httpx.AsyncBaseTransport] = None) -> FastAPI:
    """
    Application factory.

    Args:
        settings (Settings, optional): Injected settings; read from the environment when omitted
        transport (httpx.AsyncBaseTransport, optional): Transport for outbound calls, used by tests

    Returns:
        FastAPI: Configured application

    Raises:
        ConfigurationError: If the environment is misconfigured
    """
    if settings is None:
        settings = Settings.from_env()
    else:
        settings.require_credentials()

    setup_logging(settings.log_level)

    app = FastAPI(
        title="Health Wiki Proxy",
        description="Screens health questions and answers them with Wikipedia summaries",
        version=__version__
    )
    app.state.settings = settings
    app.state.pipeline = build_pipeline(settings, transport)

    logger.info(
        "Starting with response_format=%s completion_fallback=%s",
        settings.response_format,
        settings.completion_fallback,
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle Pydantic validation errors with user-friendly messages."""
        errors = exc.errors()
        detail = _friendly_validation_message(errors[0]) if errors else 'Invalid input provided'
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={'detail': detail}
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected errors gracefully."""
        logger.exception("Unexpected error: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={'detail': 'Internal server error processing request.', 'error': str(exc)}
        )

    app.add_middleware(
        EmptyPreflightCORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    @app.options("/api/chat")
    async def chat_preflight():
        """Preflight requests without CORS headers still get an empty 200."""
        return Response(status_code=status.HTTP_200_OK)

    @app.post("/api/chat")
    async def chat(chat_request: ChatIn, request: Request):
        """
        Answer a health question.

        Args:
            chat_request (ChatIn): Prompt and optional system instruction

        Returns:
            JSONResponse: Body in the configured response format; 502 `{error}`
            when an upstream API fails, 500 `{detail, error}` on unexpected errors
        """
        pipeline: QueryPipeline = request.app.state.pipeline
        response_format = request.app.state.settings.response_format

        try:
            result = await pipeline.run(chat_request.prompt, chat_request.system_text)
            return JSONResponse(
                status_code=status.HTTP_200_OK,
                content=serialize(result, response_format)
            )
        except UpstreamError as e:
            logger.error("Upstream error: %s", e)
            return JSONResponse(
                status_code=status.HTTP_502_BAD_GATEWAY,
                content={'error': str(e)}
            )
        except Exception as e:
            logger.exception("Chat error: %s", e)
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={'detail': 'Internal server error processing request.', 'error': str(e)}
            )

    @app.get("/health")
    async def health_check():
        """
        Health check endpoint for monitoring.

        Returns:
            dict: Application health status
        """
        return {
            "status": "healthy",
            "service": "health-wiki-proxy",
            "responseFormat": settings.response_format,
            "completionFallback": settings.completion_fallback,
        }

    return app


def run():
    """Console entry point: serve the app with uvicorn."""
    uvicorn.run(
        "healthwiki.main:create_app",
        factory=True,
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
    )


if __name__ == "__main__":
    run()
