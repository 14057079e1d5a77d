from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from slpscoring.config import Settings
from slpscoring.gateway import (
    MalformedResponse,
    NotFound,
    ScoringGateway,
    StatusError,
    TransportError,
)
from slpscoring.gateway import client as gateway_client

OK = {"code": 0, "message": ""}


def _hole(number: int) -> dict:
    return {"number": number, "par": 4, "matchPlayHandicap": number}


@pytest.fixture
def backend(monkeypatch):
    """Route every gateway request to ``handler`` and record what was sent."""

    state = {"handler": None, "requests": []}

    def dispatch(request: httpx.Request) -> httpx.Response:
        state["requests"].append(request)
        return state["handler"](request)

    transport = httpx.MockTransport(dispatch)
    monkeypatch.setattr(
        gateway_client,
        "_http_client_factory",
        lambda **kwargs: httpx.AsyncClient(
            transport=transport, timeout=kwargs.get("timeout")
        ),
    )
    gateway = ScoringGateway(
        Settings(
            api_base="http://backend.test/slp/sggolfjson.php",
            app_version="2.0.0 (1)",
            device_id="kiosk-1",
            source="SLPTest",
        )
    )
    return gateway, state


def _body(request: httpx.Request) -> dict:
    return json.loads(request.content)


def test_submit_score_sends_identity_and_numeric_junk_ids(backend):
    gateway, state = backend
    state["handler"] = lambda request: httpx.Response(
        200,
        json={
            "status": OK,
            "scoreID": 501,
            "playerID": "p1",
            "gameID": "g1",
            "gameHole": 3,
            "score": 5,
            "net": 4,
        },
    )

    result = asyncio.run(
        gateway.submit_score(
            game_id="g1",
            player_id="p1",
            hole_number=3,
            gross_score=5,
            junk_ids=["2", "7"],
        )
    )

    request = state["requests"][0]
    assert request.method == "POST"
    assert request.url.path == "/slp/sggolfjson.php/updateScore"
    assert _body(request) == {
        "playerID": "p1",
        "gameID": "g1",
        "gameHole": 3,
        "score": 5,
        "junkIDs": [2, 7],
        "source": "SLPTest",
        "appVersion": "2.0.0 (1)",
        "deviceID": "kiosk-1",
    }
    assert result.score_id == "501"
    assert (result.gross_score, result.net_score) == (5, 4)


def test_submit_score_rejects_non_numeric_junk_ids(backend):
    gateway, state = backend
    with pytest.raises(ValueError):
        asyncio.run(
            gateway.submit_score(
                game_id="g1",
                player_id="p1",
                hole_number=3,
                gross_score=5,
                junk_ids=["sandy"],
            )
        )
    assert state["requests"] == []


def test_submit_score_rejects_answer_for_another_cell(backend):
    gateway, state = backend
    state["handler"] = lambda request: httpx.Response(
        200,
        json={
            "status": OK,
            "scoreID": "9",
            "playerID": "p1",
            "gameID": "g1",
            "gameHole": 4,
            "score": 5,
            "net": 5,
        },
    )
    with pytest.raises(MalformedResponse):
        asyncio.run(
            gateway.submit_score(
                game_id="g1", player_id="p1", hole_number=3, gross_score=5
            )
        )


def test_submit_score_without_net_is_malformed(backend):
    gateway, state = backend
    state["handler"] = lambda request: httpx.Response(
        200,
        json={
            "status": OK,
            "scoreID": "9",
            "playerID": "p1",
            "gameID": "g1",
            "gameHole": 3,
            "score": 5,
        },
    )
    with pytest.raises(MalformedResponse):
        asyncio.run(
            gateway.submit_score(
                game_id="g1", player_id="p1", hole_number=3, gross_score=5
            )
        )


def test_status_envelope_error_carries_code_and_message(backend):
    gateway, state = backend
    state["handler"] = lambda request: httpx.Response(
        200, json={"status": {"code": 12, "message": "round is locked"}}
    )
    with pytest.raises(StatusError) as excinfo:
        asyncio.run(gateway.delete_score("77"))
    assert excinfo.value.code == 12
    assert str(excinfo.value) == "round is locked"
    assert not isinstance(excinfo.value, NotFound)


def test_delete_maps_not_found_status_and_http_404(backend):
    gateway, state = backend
    state["handler"] = lambda request: httpx.Response(
        200, json={"status": {"code": 404, "message": "no such score"}}
    )
    with pytest.raises(NotFound):
        asyncio.run(gateway.delete_score("77"))
    assert _body(state["requests"][0])["scoreID"] == "77"

    state["handler"] = lambda request: httpx.Response(404)
    with pytest.raises(NotFound):
        asyncio.run(gateway.delete_score("77"))


def test_http_failure_is_a_transport_error(backend):
    gateway, state = backend
    state["handler"] = lambda request: httpx.Response(500, text="boom")
    with pytest.raises(TransportError) as excinfo:
        asyncio.run(gateway.fetch_junk_catalog())
    assert excinfo.value.status_code == 500


def test_network_failure_is_a_transport_error(backend):
    gateway, state = backend

    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    state["handler"] = handler
    with pytest.raises(TransportError):
        asyncio.run(gateway.fetch_junk_catalog())


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, text="<html>maintenance</html>"),
        httpx.Response(200, json={"junks": []}),
        httpx.Response(200, json={"status": "ok", "junks": []}),
        httpx.Response(200, json=[1, 2, 3]),
    ],
)
def test_missing_or_broken_envelope_is_malformed(backend, response):
    gateway, state = backend
    state["handler"] = lambda request: response
    with pytest.raises(MalformedResponse):
        asyncio.run(gateway.fetch_junk_catalog())


def test_fetch_roster_parses_players_and_scores(backend):
    gateway, state = backend
    state["handler"] = lambda request: httpx.Response(
        200,
        json={
            "status": OK,
            "players": [
                {
                    "playerID": 11,
                    "firstName": "Ann",
                    "lastName": "Lee",
                    "handicap": "4.2",
                    "scores": [
                        {
                            "scoreID": 90,
                            "holeNumber": 1,
                            "grossScore": 4,
                            "netScore": 4,
                            "junks": None,
                        },
                        {"holeNumber": 2},
                    ],
                }
            ],
        },
    )

    players = asyncio.run(gateway.fetch_roster("g1", "sc1"))

    assert _body(state["requests"][0])["scorecardID"] == "sc1"
    assert players[0].player_id == "11"
    assert players[0].score_for(1).score_id == "90"
    assert players[0].score_for(1).junks == []
    assert not players[0].score_for(2).is_entered


def test_fetch_roster_with_missing_field_is_malformed(backend):
    gateway, state = backend
    state["handler"] = lambda request: httpx.Response(
        200, json={"status": OK, "players": [{"playerID": "1", "firstName": "A"}]}
    )
    with pytest.raises(MalformedResponse):
        asyncio.run(gateway.fetch_roster("g1", "sc1"))


def test_fetch_holes_uses_first_tee_sorted(backend):
    gateway, state = backend
    first_tee = [_hole(n) for n in reversed(range(1, 19))]
    state["handler"] = lambda request: httpx.Response(
        200,
        json={
            "status": OK,
            "course": {
                "courseID": "c1",
                "name": "Pines",
                "tees": [
                    {"teeID": "t1", "name": "Blue", "holes": first_tee},
                    {"teeID": "t2", "name": "Red", "holes": []},
                ],
            },
        },
    )

    holes = asyncio.run(gateway.fetch_holes("c1"))

    assert [h.number for h in holes] == list(range(1, 19))
    assert _body(state["requests"][0])["courseID"] == "c1"


def test_fetch_holes_requires_a_full_round(backend):
    gateway, state = backend
    state["handler"] = lambda request: httpx.Response(
        200,
        json={
            "status": OK,
            "course": {
                "courseID": "c1",
                "name": "Nine",
                "tees": [
                    {
                        "teeID": "t1",
                        "name": "White",
                        "holes": [_hole(n) for n in range(1, 10)],
                    }
                ],
            },
        },
    )
    with pytest.raises(MalformedResponse):
        asyncio.run(gateway.fetch_holes("c1"))


def test_membership_and_scorecard_list_requests(backend):
    gateway, state = backend
    state["handler"] = lambda request: httpx.Response(
        200,
        json={
            "status": OK,
            "scorecards": [{"scorecardID": 5, "name": "Group A"}],
        },
    )

    asyncio.run(
        gateway.add_scorecard_player(game_id="g1", scorecard_id="sc1", player_id="p9")
    )
    asyncio.run(
        gateway.remove_scorecard_player(
            game_id="g1", scorecard_id="sc1", player_id="p9"
        )
    )
    cards = asyncio.run(gateway.fetch_scorecard_list("g1"))

    paths = [r.url.path.rsplit("/", 1)[-1] for r in state["requests"]]
    assert paths == [
        "addScorecardPlayerByID",
        "removeScorecardPlayerByID",
        "getScorecardList",
    ]
    assert _body(state["requests"][0])["playerID"] == "p9"
    assert cards[0].scorecard_id == "5"


def test_malformed_base_url_is_a_transport_error():
    gateway = ScoringGateway(Settings(api_base="http://backend.test/\x01slp"))
    with pytest.raises(TransportError):
        asyncio.run(gateway.fetch_junk_catalog())
