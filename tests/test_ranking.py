from app.core.ranking import clamp_limit, rank_affiliates


def _records():
    return [
        {"username": "a", "wagered_amount": "10"},
        {"username": "b", "wagered_amount": 50},
        {"username": "c", "wagered_amount": -5},
        {"username": "d", "wagered_amount": None},
        {"username": "e", "wagered_amount": "50"},
        {"username": "f", "wagered_amount": "nan"},
        {"username": "g", "wagered_amount": 30.5, "bets": 7},
        "not-a-record",
    ]


def test_ranked_rows_are_filtered_sorted_and_dense():
    rows = rank_affiliates(_records(), 100)

    wagered = [row.wagered for row in rows]
    assert wagered == sorted(wagered, reverse=True)
    assert all(row.wagered > 0 for row in rows)
    assert [row.rank for row in rows] == list(range(1, len(rows) + 1))
    assert len(rows) == 4


def test_ties_keep_provider_order():
    rows = rank_affiliates(_records(), 100)
    assert [row.username for row in rows[:2]] == ["b", "e"]


def test_truncates_to_limit_after_sorting():
    rows = rank_affiliates(_records(), 2)

    assert [row.username for row in rows] == ["b", "e"]
    assert [row.rank for row in rows] == [1, 2]


def test_bets_carried_through_when_valid():
    rows = rank_affiliates(_records(), 100)
    by_name = {row.username: row for row in rows}

    assert by_name["g"].bets == 7
    assert by_name["a"].bets is None


def test_empty_input_yields_no_rows():
    assert rank_affiliates([], 10) == []


def test_limit_is_clamped():
    assert clamp_limit(0) == 1
    assert clamp_limit(500) == 100
    assert clamp_limit("x") == 15
