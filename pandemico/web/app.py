"""FastAPI backend для вебхуков Slack (Events API и Interactivity)."""

from __future__ import annotations

import json
from contextlib import asynccontextmanager
from typing import Any
from urllib.parse import parse_qs

from fastapi import BackgroundTasks, Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse, Response
from loguru import logger
from slack_sdk.signature import SignatureVerifier

from config.settings import AppSettings, get_settings
from pandemico.context import Services, build_services
from pandemico.handlers import guarded, handle_app_mention, handle_interaction, make_responder


def get_services(request: Request) -> Services:
    return request.app.state.services


async def verified_body(request: Request) -> bytes:
    """Сырой body запроса, прошедший проверку подписи Slack."""

    body = await request.body()
    verifier: SignatureVerifier = request.app.state.verifier
    if not verifier.is_valid_request(body, dict(request.headers)):
        logger.warning("Отклонён запрос с неверной подписью Slack: {path}", path=request.url.path)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid signature")
    return body


def create_app(settings: AppSettings | None = None, services: Services | None = None) -> FastAPI:
    """Фабрика приложения: сервисы живут ровно столько, сколько приложение."""

    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.services = services or build_services(settings)
        if settings.health_check.enabled:
            app.state.services.health_check.schedule(settings.health_check.delay_sec)
        logger.info("Pandemico стартует в окружении {env}", env=settings.environment)
        yield
        await app.state.services.health_check.stop()
        await app.state.services.notifier.drain()
        logger.info("Pandemico корректно остановлен")

    app = FastAPI(title="Pandemico Slack Bot", lifespan=lifespan)
    app.state.verifier = SignatureVerifier(settings.slack.signing_secret.get_secret_value())

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        logger.opt(exception=exc).error("Ошибка при обработке {path}", path=request.url.path)
        return JSONResponse(status_code=500, content={"ok": False, "error": "internal error"})

    @app.post("/events")
    async def slack_events(
        request: Request,
        background: BackgroundTasks,
        body: bytes = Depends(verified_body),
        services: Services = Depends(get_services),
    ) -> dict:
        try:
            payload: dict[str, Any] = json.loads(body)
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="invalid json") from exc

        kind = payload.get("type")
        if kind == "url_verification":
            return {"challenge": payload.get("challenge")}
        if request.headers.get("x-slack-retry-num"):
            logger.debug(
                "Повтор доставки события #{num} проигнорирован",
                num=request.headers.get("x-slack-retry-num"),
            )
            return {"ok": True}
        if kind != "event_callback":
            return {"ok": True, "ignored": kind}

        event = payload.get("event") or {}
        if event.get("type") == "app_mention":
            background.add_task(guarded(handle_app_mention), event, services)
        else:
            logger.debug("Событие {kind} не обрабатывается", kind=event.get("type"))
        return {"ok": True}

    @app.post("/interactions")
    async def slack_interactions(
        background: BackgroundTasks,
        body: bytes = Depends(verified_body),
        services: Services = Depends(get_services),
    ) -> Response:
        form = parse_qs(body.decode("utf-8"))
        try:
            payload: dict[str, Any] = json.loads(form["payload"][0])
        except (KeyError, IndexError, ValueError) as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="invalid payload") from exc

        respond = make_responder(payload.get("response_url"))
        background.add_task(guarded(handle_interaction), payload, services, respond)
        # view_submission закрывает модалку только при пустом ответе
        return Response(status_code=status.HTTP_200_OK)

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok", "service": "pandemico"}

    return app


__all__ = ["create_app", "get_services", "verified_body"]
