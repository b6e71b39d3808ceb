import random

import pytest

from scorecard_engine.grid import HOLES, ScoreGrid, format_to_par

ROUND_72 = [4, 3, 5, 4, 4, 3, 4, 5, 4, 4, 3, 4, 5, 4, 3, 5, 4, 4]


def test_empty_grid_has_eighteen_unset_holes():
    grid = ScoreGrid.empty()
    assert grid.to_list() == [0] * HOLES
    assert grid.total == 0
    assert not grid.has_scores
    assert all(grid.display(i) == "-" for i in range(HOLES))


def test_even_par_round_aggregates():
    agg = ScoreGrid.from_scores(ROUND_72).aggregate()
    assert (agg.front_nine, agg.back_nine, agg.total) == (36, 36, 72)
    assert agg.to_dict() == {"frontNine": 36, "backNine": 36, "total": 72}


def test_total_is_sum_of_nines_for_random_rounds():
    rng = random.Random(18)
    for _ in range(200):
        scores = [rng.randint(0, 12) for _ in range(HOLES)]
        agg = ScoreGrid.from_scores(scores).aggregate()
        assert agg.total == agg.front_nine + agg.back_nine == sum(scores)
        assert agg.front_nine == sum(scores[:9])


def test_set_score_accepts_digits_and_recomputes():
    grid = ScoreGrid.empty().set_score(0, "4").set_score(17, "12")
    assert grid.scores[0] == 4
    assert grid.scores[17] == 12
    assert grid.front_nine == 4
    assert grid.back_nine == 12
    grid = grid.set_score(0, "5")
    assert grid.total == 17


@pytest.mark.parametrize("raw", ["4a", "-1", " 4", "4.0", "+3", "٣", "x"])
def test_set_score_rejects_non_digit_input_silently(raw):
    grid = ScoreGrid.from_scores(ROUND_72)
    assert grid.set_score(3, raw) is grid


def test_empty_and_zero_input_both_store_zero():
    grid = ScoreGrid.from_scores(ROUND_72)
    cleared = grid.set_score(2, "")
    zeroed = grid.set_score(2, "0")
    assert cleared.scores[2] == 0
    assert cleared == zeroed
    assert cleared.display(2) == "-"


def test_set_score_out_of_range_hole_raises():
    with pytest.raises(IndexError):
        ScoreGrid.empty().set_score(18, "4")


@pytest.mark.parametrize(
    "values",
    [[4] * 17, [4] * 19, [4] * 17 + [-1], [4] * 17 + [True], [4] * 17 + [4.5]],
)
def test_from_scores_validates_shape_and_values(values):
    with pytest.raises(ValueError):
        ScoreGrid.from_scores(values)


def test_grid_is_immutable_value():
    grid = ScoreGrid.empty()
    edited = grid.set_score(4, "3")
    assert grid.scores[4] == 0
    assert edited != grid
    assert hash(edited) == hash(ScoreGrid.empty().set_score(4, "3"))


def test_format_to_par():
    assert format_to_par(72) == "E"
    assert format_to_par(75) == "+3"
    assert format_to_par(70) == "-2"
    assert format_to_par(36, par=36) == "E"


def test_trailing_newline_is_not_a_digit():
    grid = ScoreGrid.empty()
    assert grid.set_score(0, "4\n") is grid
