import re

import pytest
from fastapi.testclient import TestClient

from coin_api.main import create_app
from coin_api.services.flips import INVALID_TIMES_MESSAGE


def test_flip_coins_counts_add_up(client, context):
    resp = client.get("/flip-coins", params={"times": 10})
    assert resp.status_code == 200
    body = resp.json()
    assert set(body) == {"heads", "tails"}
    assert body["heads"] + body["tails"] == 10

    counts = client.get("/current-counts").json()
    assert counts["total_flips"] == 10
    assert counts["heads"] + counts["tails"] == 10
    assert counts["heads"] == body["heads"]
    assert context.registry.get_value("error_counter") == 0


@pytest.mark.parametrize("times", ["-5", "0", "abc", "", "0.5", "١٠"])
def test_flip_coins_rejects_invalid_times(client, context, times):
    before = context.registry.get_value("error_counter")
    resp = client.get("/flip-coins", params={"times": times})
    assert resp.status_code == 400
    assert resp.json() == {"error": INVALID_TIMES_MESSAGE}
    assert context.registry.get_value("error_counter") == before + 1
    assert context.registry.get_value("flip_count") == 0


@pytest.mark.parametrize(
    "times,expected", [("2.5", 2), ("10abc", 10), ("1e3", 1), ("1_000", 1)]
)
def test_flip_coins_uses_leading_integer(client, times, expected):
    resp = client.get("/flip-coins", params={"times": times})
    assert resp.status_code == 200
    body = resp.json()
    assert body["heads"] + body["tails"] == expected
    assert client.get("/current-counts").json()["total_flips"] == expected


def test_flip_coins_rejects_more_than_max_times(settings):
    app = create_app(settings.model_copy(update={"max_flip_times": 100}))
    client = TestClient(app)
    resp = client.get("/flip-coins", params={"times": 101})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Please provide a number of times no greater than 100."}
    registry = app.state.context.registry
    assert registry.get_value("error_counter") == 1
    assert registry.get_value("flip_count") == 0
    assert client.get("/flip-coins", params={"times": 100}).status_code == 200


def test_flip_coins_without_times(client, context):
    resp = client.get("/flip-coins")
    assert resp.status_code == 400
    assert resp.json()["error"] == INVALID_TIMES_MESSAGE
    assert context.registry.get_value("error_counter") == 1


def test_current_counts_is_idempotent(client):
    client.get("/flip-coins", params={"times": 25})
    first = client.get("/current-counts").json()
    second = client.get("/current-counts").json()
    assert first == second


def test_reset_counters(client, context):
    client.get("/flip-coins", params={"times": 5})
    client.get("/flip-coins", params={"times": -1})
    resp = client.get("/reset-counters")
    assert resp.status_code == 200
    assert resp.text == "Counters have been reset."
    assert resp.headers["content-type"].startswith("text/plain")
    assert client.get("/current-counts").json() == {
        "heads": 0,
        "tails": 0,
        "total_flips": 0,
    }
    assert context.registry.get_value("error_counter") == 1


def test_flip_random(client):
    for _ in range(20):
        resp = client.get("/flip-random")
        assert resp.status_code == 200
        body = resp.json()
        total = body["heads"] + body["tails"]
        assert 1 <= total <= 100
        match = re.fullmatch(r"Flipped coins (\d+) times", body["message"])
        assert match is not None
        assert int(match.group(1)) == total


def test_flip_random_is_deterministic_with_scripted_generator(settings, scripted_generator):
    app = create_app(settings, generator=scripted_generator([0.25, 0.75], batch_size=4))
    client = TestClient(app)
    assert client.get("/flip-random").json() == {
        "message": "Flipped coins 4 times",
        "heads": 2,
        "tails": 2,
    }
    assert client.get("/current-counts").json()["total_flips"] == 4


def test_flip_stats_with_no_flips(client):
    resp = client.get("/flip-stats")
    assert resp.status_code == 200
    assert resp.json() == {
        "total_flips": 0,
        "heads": 0,
        "tails": 0,
        "heads_percentage": "0.00%",
        "tails_percentage": "0.00%",
    }


def test_flip_stats_percentages_sum_to_hundred(client):
    client.get("/flip-coins", params={"times": 37})
    body = client.get("/flip-stats").json()
    assert body["total_flips"] == 37
    heads = float(body["heads_percentage"].rstrip("%"))
    tails = float(body["tails_percentage"].rstrip("%"))
    assert heads + tails == pytest.approx(100.0, abs=0.011)
    assert re.fullmatch(r"\d{1,3}\.\d{2}%", body["heads_percentage"])


def test_flip_stats_exact_values(settings, scripted_generator):
    app = create_app(settings, generator=scripted_generator([0.1, 0.6, 0.6, 0.6]))
    client = TestClient(app)
    client.get("/flip-coins", params={"times": 8})
    assert client.get("/flip-stats").json() == {
        "total_flips": 8,
        "heads": 2,
        "tails": 6,
        "heads_percentage": "25.00%",
        "tails_percentage": "75.00%",
    }


def test_apps_do_not_share_counters(settings):
    first = TestClient(create_app(settings))
    second = TestClient(create_app(settings))
    first.get("/flip-coins", params={"times": 3})
    assert second.get("/current-counts").json()["total_flips"] == 0
