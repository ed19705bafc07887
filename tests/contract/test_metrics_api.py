"""Contract test for /{tag}/metrics API endpoint."""

from monitoring_exporter.config.settings import (
    AuthSettings,
    CollectionSettings,
    RateLimitSettings,
    Settings,
)
from monitoring_exporter.metrics.metric import CallbackMetric, MetricType, SimpleMetric
from monitoring_exporter.models.sample import Sample

CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"


def failing_producer(registry) -> None:
    raise RuntimeError("database unavailable")


def bad_samples_producer(registry) -> None:
    registry.register(CallbackMetric("ratio", lambda: [0.5, object()]))


class TestMetricsAPI:
    """Contract tests for the tag-scoped scrape endpoint."""

    def test_valid_token_returns_exposition(self, make_client, up_producer, valid_token) -> None:
        client = make_client([up_producer])

        response = client.get("/team1/metrics", params={"token": valid_token})

        assert response.status_code == 200, f"Expected 200, got {response.status_code}"
        assert response.headers["content-type"] == CONTENT_TYPE
        assert response.text == "up 1.0\n"
        assert up_producer.call_count == 1

    def test_invalid_token_returns_401_without_collecting(self, make_client, up_producer) -> None:
        client = make_client([up_producer])

        response = client.get("/team1/metrics", params={"token": "wrong"})

        assert response.status_code == 401
        assert response.text == ""
        assert response.headers["www-authenticate"] == "Bearer"
        assert up_producer.call_count == 0

    def test_missing_token_returns_401(self, make_client, up_producer) -> None:
        client = make_client([up_producer])

        response = client.get("/team1/metrics")

        assert response.status_code == 401
        assert up_producer.call_count == 0

    def test_unknown_tag_returns_401(self, make_client, up_producer, valid_token) -> None:
        client = make_client([up_producer])

        response = client.get("/team2/metrics", params={"token": valid_token})

        assert response.status_code == 401
        assert response.text == ""
        assert up_producer.call_count == 0

    def test_bearer_header_accepted(self, make_client, up_producer, valid_token) -> None:
        client = make_client([up_producer])

        response = client.get("/team1/metrics", headers={"Authorization": f"Bearer {valid_token}"})

        assert response.status_code == 200
        assert response.text == "up 1.0\n"

    def test_query_token_takes_precedence_over_header(self, make_client, up_producer, valid_token) -> None:
        client = make_client([up_producer])

        response = client.get(
            "/team1/metrics",
            params={"token": "wrong"},
            headers={"Authorization": f"Bearer {valid_token}"},
        )

        assert response.status_code == 401

    def test_bearer_header_ignored_when_disabled(self, make_client, up_producer, valid_token) -> None:
        settings = Settings(
            environment="test",
            auth=AuthSettings(tag_tokens={"team1": valid_token}, allow_bearer_header=False),
            collection=CollectionSettings(timeout_seconds=None),
            rate_limit=RateLimitSettings(enabled=False),
        )
        client = make_client([up_producer], settings=settings)

        response = client.get("/team1/metrics", headers={"Authorization": f"Bearer {valid_token}"})

        assert response.status_code == 401

    def test_non_alphanumeric_tag_rejected(self, make_client, up_producer, valid_token) -> None:
        client = make_client([up_producer])

        response = client.get("/team_1/metrics", params={"token": valid_token})

        assert response.status_code == 422
        assert up_producer.call_count == 0

    def test_no_producers_returns_empty_body(self, make_client, valid_token) -> None:
        client = make_client([])

        response = client.get("/team1/metrics", params={"token": valid_token})

        assert response.status_code == 200
        assert response.text == ""

    def test_failing_producer_still_returns_200(self, make_client, up_producer, valid_token) -> None:
        client = make_client([failing_producer, up_producer])

        response = client.get("/team1/metrics", params={"token": valid_token})

        assert response.status_code == 200
        assert response.text == "up 1.0\n"

    def test_metric_with_bad_samples_does_not_fail_scrape(self, make_client, up_producer, valid_token) -> None:
        client = make_client([bad_samples_producer, up_producer])

        response = client.get("/team1/metrics", params={"token": valid_token})

        assert response.status_code == 200
        assert response.text == "up 1.0\n"

    def test_callback_returning_numbers_renders(self, make_client, spy_producer, valid_token) -> None:
        client = make_client([spy_producer(CallbackMetric("ratio", lambda: [0.5, 0.7], metric_type=None))])

        response = client.get("/team1/metrics", params={"token": valid_token})

        assert response.text == "ratio 0.5\nratio 0.7\n"

    def test_headers_and_labels(self, make_client, spy_producer, valid_token) -> None:
        producer = spy_producer(SimpleMetric(
            "users_online",
            [Sample(value=3, labels={"time_window": "60s"})],
            description="Users online",
            metric_type=MetricType.GAUGE,
        ))
        client = make_client([producer])

        response = client.get("/team1/metrics", params={"token": valid_token})

        assert response.text == (
            "# HELP users_online Users online\n"
            "# TYPE users_online gauge\n"
            'users_online{time_window="60s"} 3.0\n'
        )

    def test_each_scrape_collects_again(self, make_client, up_producer, valid_token) -> None:
        client = make_client([up_producer])

        client.get("/team1/metrics", params={"token": valid_token})
        client.get("/team1/metrics", params={"token": valid_token})

        assert up_producer.call_count == 2
        assert up_producer.calls[0] is not up_producer.calls[1]

    def test_request_id_echoed(self, make_client, up_producer, valid_token) -> None:
        client = make_client([up_producer])

        response = client.get(
            "/team1/metrics",
            params={"token": valid_token},
            headers={"X-Request-ID": "scrape-123"},
        )

        assert response.headers["x-request-id"] == "scrape-123"

    def test_request_id_generated_when_absent(self, make_client, up_producer, valid_token) -> None:
        client = make_client([up_producer])

        response = client.get("/team1/metrics", params={"token": valid_token})

        assert len(response.headers["x-request-id"]) == 36

    def test_rate_limit_exceeded_returns_429(self, make_client, up_producer, valid_token) -> None:
        settings = Settings(
            environment="test",
            auth=AuthSettings(tag_tokens={"team1": valid_token}),
            collection=CollectionSettings(timeout_seconds=None),
            rate_limit=RateLimitSettings(enabled=True, default_limits=["2/minute"]),
        )
        client = make_client([up_producer], settings=settings)

        statuses = [
            client.get("/team1/metrics", params={"token": valid_token}).status_code
            for _ in range(3)
        ]

        assert statuses == [200, 200, 429]

    def test_default_producers_serve_liveness_and_self_metrics(self, test_settings, valid_token) -> None:
        from fastapi.testclient import TestClient

        from monitoring_exporter.api.main import create_app

        client = TestClient(create_app(settings=test_settings))

        response = client.get("/team1/metrics", params={"token": valid_token})

        assert response.status_code == 200
        assert "# TYPE exporter_up gauge\nexporter_up 1.0\n" in response.text
        assert "\nup " not in response.text
        assert "exporter_build_info{" in response.text
        assert "# TYPE exporter_scrapes_total counter\n" in response.text
