from __future__ import annotations

import asyncio

from slpscoring.models import Score
from slpscoring.scorecard import (
    LiveTotals,
    SessionStore,
    project_scores,
    project_totals,
)

from .fakes import make_player, open_session


def test_front_and_back_add_up_to_total():
    player = make_player("p1", scores=[(1, 4), (9, 5), (10, 3), (18, 6)])
    totals = project_scores("p1", player.scores)
    assert (totals.front_gross, totals.back_gross) == (9, 9)
    assert totals.total_gross == totals.front_gross + totals.back_gross == 18
    assert totals.total_net == 18
    assert totals.holes_played == 4


def test_unentered_scores_and_missing_values_contribute_nothing():
    scores = [
        Score(hole_number=2),
        Score(score_id="s1", hole_number=3),
        Score(score_id="s2", hole_number=11, gross_score=5),
        Score(score_id="s3", hole_number=12, gross_score=4, net_score=3),
    ]
    totals = project_scores("p1", scores)
    assert (totals.front_gross, totals.front_net) == (0, 0)
    assert (totals.back_gross, totals.back_net) == (9, 3)
    assert totals.holes_played == 2


def test_as_dict_uses_camel_case_keys():
    totals = project_scores("p1", make_player("p1", scores=[(1, 4)]).scores)
    assert totals.as_dict() == {
        "playerId": "p1",
        "frontGross": 4,
        "backGross": 0,
        "totalGross": 4,
        "frontNet": 4,
        "backNet": 0,
        "totalNet": 4,
        "holesPlayed": 1,
    }


def test_projection_follows_roster_order(gateway):
    async def main():
        store, _ = await open_session(gateway)
        totals = project_totals(store)
        assert [t.player_id for t in totals] == ["p1", "p2"]
        assert [t.total_gross for t in totals] == [9, 0]

    asyncio.run(main())


def test_live_totals_recompute_after_every_change(gateway):
    async def main():
        store, reconciler = await open_session(gateway)
        live = LiveTotals(store)
        assert live.for_player("p1").total_gross == 9

        await reconciler.enter_gross("p1", 10, "6")
        assert live.for_player("p1").back_gross == 6
        assert live.for_player("p1").total_gross == 15

        await reconciler.enter_gross("p1", 1, "")
        assert live.for_player("p1").total_gross == 11

        before = live.recomputed
        live.close()
        store.remove_cell("p1", 2)
        assert live.recomputed == before
        assert live.for_player("p1").total_gross == 11

    asyncio.run(main())


def test_live_totals_empty_until_ready(gateway):
    store = SessionStore(gateway)
    live = LiveTotals(store)
    assert live.current == {}
    assert live.for_player("p1") is None
