import pytest
import requests

from tripcast.api import accuweather
from tripcast.api.accuweather import (
    ForecastRequest,
    fetch_daily_forecast,
    fetch_hourly_forecast,
    resolve_api_key,
)
from tripcast.errors import ConfigError, NetworkError


class FakeResponse:
    def __init__(self, payload=None, status_code: int = 200, text: str = "") -> None:
        self._payload = payload
        self.status_code = status_code
        self.text = text

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


def _daily(*dates: str) -> dict:
    return {"DailyForecasts": [{"Date": f"{value}T07:00:00+04:00"} for value in dates]}


def test_fetch_daily_forecast_sends_metric_detail_params(monkeypatch) -> None:
    calls = []

    def fake_get(url, params=None, timeout=None):
        calls.append((url, params, timeout))
        return FakeResponse(_daily("2024-01-10"))

    monkeypatch.setattr(accuweather.requests, "get", fake_get)

    result = fetch_daily_forecast(ForecastRequest(location_key="323091", api_key="secret", timeout_seconds=7))

    assert result.horizon_days == 5
    url, params, timeout = calls[0]
    assert url.endswith("/forecasts/v1/daily/5day/323091")
    assert params == {"apikey": "secret", "metric": "true", "details": "true"}
    assert timeout == 7


def test_non_success_status_raises_network_error(monkeypatch) -> None:
    monkeypatch.setattr(
        accuweather.requests,
        "get",
        lambda url, params=None, timeout=None: FakeResponse(status_code=503, text="Service Unavailable"),
    )

    with pytest.raises(NetworkError) as exc:
        fetch_daily_forecast(ForecastRequest(location_key="323091", api_key="k"))

    assert exc.value.status_code == 503
    assert exc.value.body == "Service Unavailable"
    assert "503" in str(exc.value)


def test_fifteen_day_falls_back_to_five_day(monkeypatch, caplog) -> None:
    urls = []

    def fake_get(url, params=None, timeout=None):
        urls.append(url)
        if "/15day/" in url:
            return FakeResponse(status_code=401, text="Unauthorized")
        return FakeResponse(_daily("2024-01-10", "2024-01-11"))

    monkeypatch.setattr(accuweather.requests, "get", fake_get)
    caplog.set_level("WARNING")

    result = fetch_daily_forecast(ForecastRequest(location_key="323091", api_key="k", days=15))

    assert result.horizon_days == 5
    assert len(result.raw["DailyForecasts"]) == 2
    assert [url.rsplit("/", 2)[-2] for url in urls] == ["15day", "5day"]
    assert "falling back to 5-day" in caplog.text


def test_fifteen_day_success_keeps_horizon(monkeypatch) -> None:
    monkeypatch.setattr(
        accuweather.requests,
        "get",
        lambda url, params=None, timeout=None: FakeResponse(_daily("2024-01-10")),
    )

    result = fetch_daily_forecast(ForecastRequest(location_key="323091", api_key="k", days=15))

    assert result.horizon_days == 15


def test_unsupported_horizon_is_reset(caplog) -> None:
    caplog.set_level("WARNING")
    request = ForecastRequest(location_key="323091", api_key="k", days=10)
    assert request.days == 5
    assert "Unsupported daily horizon" in caplog.text


def test_timeout_maps_to_network_error(monkeypatch) -> None:
    def fake_get(url, params=None, timeout=None):
        raise requests.Timeout("read timed out")

    monkeypatch.setattr(accuweather.requests, "get", fake_get)

    with pytest.raises(NetworkError) as exc:
        fetch_daily_forecast(ForecastRequest(location_key="323091", api_key="k", timeout_seconds=3))

    assert exc.value.status_code is None
    assert "timed out" in str(exc.value)


def test_connection_error_hides_query_string(monkeypatch) -> None:
    def fake_get(url, params=None, timeout=None):
        raise requests.ConnectionError("failed for https://example.test/x?apikey=secret")

    monkeypatch.setattr(accuweather.requests, "get", fake_get)

    with pytest.raises(NetworkError) as exc:
        fetch_daily_forecast(ForecastRequest(location_key="323091", api_key="secret"))

    assert "apikey=secret" not in str(exc.value)


def test_payload_without_daily_forecasts_is_rejected(monkeypatch) -> None:
    monkeypatch.setattr(
        accuweather.requests,
        "get",
        lambda url, params=None, timeout=None: FakeResponse({"Headline": {}}),
    )

    with pytest.raises(NetworkError, match="DailyForecasts"):
        fetch_daily_forecast(ForecastRequest(location_key="323091", api_key="k"))


def test_invalid_json_is_rejected(monkeypatch) -> None:
    monkeypatch.setattr(
        accuweather.requests,
        "get",
        lambda url, params=None, timeout=None: FakeResponse(ValueError("no json")),
    )

    with pytest.raises(NetworkError, match="Invalid JSON"):
        fetch_daily_forecast(ForecastRequest(location_key="323091", api_key="k"))


def test_fetch_hourly_requires_array(monkeypatch) -> None:
    monkeypatch.setattr(
        accuweather.requests,
        "get",
        lambda url, params=None, timeout=None: FakeResponse({"not": "a list"}),
    )

    with pytest.raises(NetworkError):
        fetch_hourly_forecast(ForecastRequest(location_key="323091", api_key="k"))


def test_fetch_hourly_returns_entries(monkeypatch) -> None:
    seen = {}

    def fake_get(url, params=None, timeout=None):
        seen["url"] = url
        return FakeResponse([{"DateTime": "2024-01-10T13:00:00+04:00"}])

    monkeypatch.setattr(accuweather.requests, "get", fake_get)

    hours = fetch_hourly_forecast(ForecastRequest(location_key="323091", api_key="k"))

    assert len(hours) == 1
    assert seen["url"].endswith("/forecasts/v1/hourly/12hour/323091")


def test_resolve_api_key_prefers_explicit() -> None:
    assert resolve_api_key("explicit", "from-env") == "explicit"
    assert resolve_api_key(None, "from-env") == "from-env"
    with pytest.raises(ConfigError, match="ACCUWEATHER_API_KEY"):
        resolve_api_key(None, None)
