"""
Guarded calls to the LLM providers.

Every provider call goes through ServiceGateway.execute(), which
  - fails fast while the provider's circuit is open,
  - caps concurrent calls per provider,
  - enforces a per-call timeout,
  - retries transient failures with jittered exponential backoff.

Limits come from settings (LLM_TIMEOUT_SECONDS, LLM_MAX_RETRIES, LLM_MAX_CONCURRENT,
LLM_CIRCUIT_THRESHOLD, LLM_CIRCUIT_RECOVERY_SECONDS).
"""
import asyncio
import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional

import openai

from careermate.config import Settings, get_settings
from careermate.utils import metrics
from careermate.utils.logger import get_logger

logger = get_logger("gateway")

PROVIDERS = ("openai", "azure", "gemini")


@dataclass(frozen=True)
class ServiceConfig:
    max_concurrent: int = 10
    timeout_seconds: float = 90.0
    max_retries: int = 2
    circuit_failure_threshold: int = 5
    circuit_recovery_seconds: float = 30.0
    base_backoff_seconds: float = 1.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "ServiceConfig":
        return cls(
            max_concurrent=settings.llm_max_concurrent,
            timeout_seconds=settings.llm_timeout_seconds,
            max_retries=settings.llm_max_retries,
            circuit_failure_threshold=settings.llm_circuit_threshold,
            circuit_recovery_seconds=settings.llm_circuit_recovery_seconds,
        )


class CircuitState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreaker:
    """
    Consecutive-failure breaker for one provider.

    After `circuit_failure_threshold` failures in a row the circuit opens and
    calls are rejected until `circuit_recovery_seconds` have passed. The next
    call is then let through as a probe: success closes the circuit, failure
    reopens it.
    """

    def __init__(self, provider: str, config: ServiceConfig):
        self.provider = provider
        self.config = config
        self.state = CircuitState.CLOSED
        self.consecutive_failures = 0
        self.opened_at = 0.0

    def allow_request(self) -> bool:
        if self.state != CircuitState.OPEN:
            return True
        if time.monotonic() - self.opened_at < self.config.circuit_recovery_seconds:
            return False
        self.state = CircuitState.HALF_OPEN
        logger.info(f"[Gateway] {self.provider} circuit half-open, probing", extra={"provider": self.provider})
        return True

    def record_success(self) -> None:
        if self.state == CircuitState.HALF_OPEN:
            logger.info(f"[Gateway] {self.provider} circuit closed", extra={"provider": self.provider})
        self.state = CircuitState.CLOSED
        self.consecutive_failures = 0

    def record_failure(self) -> None:
        self.consecutive_failures += 1
        tripped = self.consecutive_failures >= self.config.circuit_failure_threshold
        if self.state == CircuitState.HALF_OPEN or (self.state == CircuitState.CLOSED and tripped):
            self.state = CircuitState.OPEN
            self.opened_at = time.monotonic()
            metrics.inc(f"llm.{self.provider}.circuit_opened")
            logger.warning(
                f"[Gateway] {self.provider} circuit opened after {self.consecutive_failures} failures",
                extra={"provider": self.provider, "attempt": self.consecutive_failures},
            )


class CircuitOpenError(Exception):
    """The provider's circuit is open; the call was not attempted."""

    def __init__(self, service: str):
        self.service = service
        super().__init__(f"Circuit breaker OPEN for {service}: request rejected")


# Network trouble, throttling and provider-side 5xx
_TRANSIENT_ERRORS = (
    asyncio.TimeoutError,
    ConnectionError,
    openai.APIConnectionError,
    openai.RateLimitError,
    openai.InternalServerError,
)


def is_transient(exc: Exception) -> bool:
    """True if the call is worth retrying"""
    if isinstance(exc, _TRANSIENT_ERRORS):
        return True
    # openai errors carry status_code, google.api_core errors carry code
    status = getattr(exc, "status_code", None) or getattr(exc, "code", None)
    return isinstance(status, int) and (status == 429 or 500 <= status < 600)


class ServiceGateway:
    """One breaker and one concurrency limit per configured provider."""

    def __init__(self, config: Optional[Dict[str, ServiceConfig]] = None) -> None:
        if config is None:
            shared = ServiceConfig.from_settings(get_settings())
            config = {provider: shared for provider in PROVIDERS}
        self._config = config
        self._circuits = {name: CircuitBreaker(name, cfg) for name, cfg in config.items()}
        self._semaphores = {name: asyncio.Semaphore(cfg.max_concurrent) for name, cfg in config.items()}

    async def execute(self, service: str, fn: Callable[..., Awaitable[Any]], *args: Any, **kwargs: Any) -> Any:
        cfg = self._config.get(service)
        if cfg is None:
            # Unconfigured provider (tests, local fakes): call straight through
            return await fn(*args, **kwargs)

        circuit = self._circuits[service]
        if not circuit.allow_request():
            metrics.inc(f"llm.{service}.rejected")
            raise CircuitOpenError(service)

        started = time.monotonic()
        attempt = 0
        while True:
            attempt += 1
            try:
                async with self._semaphores[service]:
                    result = await asyncio.wait_for(fn(*args, **kwargs), timeout=cfg.timeout_seconds)
            except Exception as exc:
                circuit.record_failure()
                metrics.inc(f"llm.{service}.error")
                if attempt > cfg.max_retries or not is_transient(exc):
                    logger.error(
                        f"[Gateway] {service} call failed: {exc}",
                        extra={"provider": service, "attempt": attempt, "error_type": type(exc).__name__},
                    )
                    raise

                backoff = cfg.base_backoff_seconds * (2 ** (attempt - 1))
                wait = backoff + random.uniform(0, backoff / 2)
                logger.warning(
                    f"[Gateway] {service} transient error, retrying",
                    extra={"provider": service, "attempt": attempt, "wait_seconds": round(wait, 2), "error": str(exc)[:200]},
                )
                await asyncio.sleep(wait)
                if not circuit.allow_request():
                    raise CircuitOpenError(service) from exc
                continue

            circuit.record_success()
            metrics.inc(f"llm.{service}.success")
            metrics.observe(f"llm.{service}.duration_ms", (time.monotonic() - started) * 1000)
            return result

    def get_circuit_states(self) -> Dict[str, str]:
        return {name: circuit.state.value for name, circuit in self._circuits.items()}


_gateway: Optional[ServiceGateway] = None


def get_gateway() -> ServiceGateway:
    global _gateway
    if _gateway is None:
        _gateway = ServiceGateway()
    return _gateway
