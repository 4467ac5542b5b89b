import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

_FOREST_ENV_VARS = (
    "FOREST_SEED",
    "FOREST_LEADERBOARD_BACKEND",
    "FOREST_LEADERBOARD_URL",
    "FOREST_LEADERBOARD_AUTO_SUBMIT",
    "FOREST_DATABASE_URL",
    "FOREST_LOG_LEVEL",
    "FOREST_HTTP_RETRIES",
    "FOREST_HTTP_BACKOFF_S",
    "FOREST_HTTP_TIMEOUT_S",
    "FOREST_HTTP_CIRCUIT_BREAKER_ENABLED",
    "FOREST_HTTP_CIRCUIT_FAILURE_THRESHOLD",
    "FOREST_HTTP_CIRCUIT_RESET_SECONDS",
)


@pytest.fixture(autouse=True)
def disable_sleep(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("time.sleep", lambda *_args, **_kwargs: None)


@pytest.fixture(autouse=True)
def clean_forest_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _FOREST_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def block_external_http(monkeypatch: pytest.MonkeyPatch) -> None:
    import httpx

    _original_handle = httpx.HTTPTransport.handle_request

    def _deny_external_http(self, request):
        host = request.url.host
        if host in {"127.0.0.1", "localhost"}:
            return _original_handle(self, request)
        raise RuntimeError(f"External HTTP disabled during tests: {request.url}")

    monkeypatch.setattr(httpx.HTTPTransport, "handle_request", _deny_external_http)


@pytest.fixture(autouse=True)
def reset_http_circuits():
    yield
    from forest_rescue.infrastructure.resilient_http import reset_circuit_breakers

    reset_circuit_breakers()
