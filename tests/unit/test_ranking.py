"""Tests for leaderboard rank assignment."""

from aceapt.leaderboard.ranking import assign_ranks


class TestAssignRanks:
    def test_ties_share_rank_and_next_skips(self):
        entries = [
            {"id": 3, "coins": 30},
            {"id": 1, "coins": 50},
            {"id": 2, "coins": 50},
        ]
        ranked = assign_ranks(entries)
        assert [(e["id"], e["rank"]) for e in ranked] == [(1, 1), (2, 1), (3, 3)]

    def test_orders_by_coins_then_id(self):
        entries = [
            {"id": 9, "coins": 0},
            {"id": 4, "coins": 7},
            {"id": 2, "coins": 0},
        ]
        ranked = assign_ranks(entries)
        assert [e["id"] for e in ranked] == [4, 2, 9]
        assert [e["rank"] for e in ranked] == [1, 2, 2]

    def test_rank_is_count_of_richer_entries_plus_one(self):
        balances = [12, 90, 12, 5, 90, 40]
        entries = [{"id": i, "coins": c} for i, c in enumerate(balances)]
        for entry in assign_ranks(entries):
            assert entry["rank"] == sum(1 for other in balances if other > entry["coins"]) + 1

    def test_single_entry(self):
        assert assign_ranks([{"id": 1, "coins": 0}])[0]["rank"] == 1

    def test_empty(self):
        assert assign_ranks([]) == []
