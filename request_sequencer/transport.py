"""HTTP-транспорт на httpx: один POST с жестким таймаутом."""

from __future__ import annotations

import asyncio
from urllib.parse import quote

import httpx

from request_sequencer.cancellation import CancellationToken
from request_sequencer.config import SequencerConfig
from request_sequencer.exceptions import TransientError
from request_sequencer.interfaces import Transport
from request_sequencer.logging import get_logger
from request_sequencer.models import Outcome

DEFAULT_HEADERS = {
    "Accept": "application/json, text/plain, */*",
    "Content-Type": "application/json",
    "Accept-Language": "en",
}


def build_url(endpoint: str, relay_url: str | None = None) -> str:
    """Строит URL запроса с учетом relay-обертки.

    Args:
        endpoint: Реальный URL конечной точки
        relay_url: Префикс relay (например "https://relay.example/?url=")

    Returns:
        URL для отправки запроса

    Пример:
        >>> build_url("https://api.example/otp", "https://relay.example/?url=")
        'https://relay.example/?url=https%3A%2F%2Fapi.example%2Fotp'
    """
    if not relay_url:
        return endpoint
    return f"{relay_url}{quote(endpoint, safe='')}"


class HttpTransport(Transport):
    """Транспорт, отправляющий один POST на каждый вызов send().

    Таймаут действует на весь вызов целиком и не зависит от отмены:
    его истечение - это TransientError, а не Cancelled. Уже начатый
    запрос отменой не прерывается; токен проверяется на входе и
    после получения ответа.

    Attributes:
        config: Конфигурация транспорта
        url: Итоговый URL запроса (с учетом relay)
    """

    def __init__(
        self,
        config: SequencerConfig,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Инициализирует транспорт.

        Args:
            config: Конфигурация (endpoint обязателен)
            client: Готовый клиент httpx; если не передан, создается свой

        Raises:
            ConfigurationError: Если endpoint не задан
        """
        self.config = config
        self.url = build_url(config.require_endpoint(), config.relay_url)
        self._owns_client = client is None
        if client is None:
            client = httpx.AsyncClient(timeout=httpx.Timeout(config.timeout))
        self._client = client
        self._logger = get_logger("transport")

    @property
    def route(self) -> str:
        if not self.config.relay_url:
            return "direct"
        return httpx.URL(self.config.relay_url).host or "relay"

    def build_headers(self) -> dict[str, str]:
        """Собирает фиксированный набор заголовков запроса."""
        headers = dict(DEFAULT_HEADERS)
        headers.update(self.config.headers)
        if self.config.api_key:
            headers["x-api-key"] = self.config.api_key
        return headers

    async def send(self, target: str, token: CancellationToken) -> Outcome:
        token.raise_if_cancelled()

        payload = {self.config.target_field: target}
        self._logger.debug("Sending request", extra={"url": self.url})
        try:
            response = await asyncio.wait_for(
                self._client.post(
                    self.url, json=payload, headers=self.build_headers()
                ),
                timeout=self.config.timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise TransientError(
                f"Request timed out after {self.config.timeout:g}s"
            ) from e
        except httpx.RequestError as e:
            raise TransientError(f"Network error: {e}") from e

        token.raise_if_cancelled()
        self._logger.debug(
            "Response received", extra={"status": response.status_code}
        )
        return Outcome(
            ok=response.is_success,
            status=response.status_code,
            body=response.text,
        )

    async def aclose(self) -> None:
        """Закрывает собственный клиент httpx."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> HttpTransport:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
