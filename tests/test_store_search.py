from __future__ import annotations

from unittest import mock

import pytest
import requests

from steam_command_runner.errors import StoreSearchError
from steam_command_runner.steam.store_search import STORE_SEARCH_URL, search_store


def fake_response(payload):
    resp = mock.Mock()
    resp.json.return_value = payload
    resp.raise_for_status.return_value = None
    return resp


def test_search_store_parses_items() -> None:
    payload = {
        "total": 3,
        "items": [
            {"id": 70, "name": "Half-Life"},
            {"id": "220", "name": "Half-Life 2"},
            {"name": "missing id"},
        ],
    }
    with mock.patch("requests.get", return_value=fake_response(payload)) as get:
        results = search_store("Half-Life", limit=5)

    assert [(r.app_id, r.name) for r in results] == [(70, "Half-Life"), (220, "Half-Life 2")]
    args, kwargs = get.call_args
    assert args[0] == STORE_SEARCH_URL
    assert kwargs["params"] == {"term": "Half-Life", "l": "english", "cc": "US"}
    assert "User-Agent" in kwargs["headers"]


def test_search_store_respects_limit() -> None:
    payload = {"items": [{"id": i, "name": f"Game {i}"} for i in range(20)]}
    with mock.patch("requests.get", return_value=fake_response(payload)):
        assert len(search_store("Game", limit=3)) == 3


def test_search_store_network_error() -> None:
    with mock.patch("requests.get", side_effect=requests.ConnectionError("offline")):
        with pytest.raises(StoreSearchError):
            search_store("Half-Life")


def test_search_store_bad_json() -> None:
    resp = fake_response(None)
    resp.json.side_effect = ValueError("no json")
    with mock.patch("requests.get", return_value=resp):
        with pytest.raises(StoreSearchError):
            search_store("Half-Life")
