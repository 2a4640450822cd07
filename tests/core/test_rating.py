"""Tests for rating summary aggregation."""

import pytest

from review_api.core.rating import compute_summary, round_half_up


class TestRoundHalfUp:
    @pytest.mark.parametrize("value,expected", [
        (4.5, 5),
        (3.49, 3),
        (2.5, 3),
        (1.0, 1),
        (-0.5, 0),
    ])
    def test_half_rounds_toward_positive_infinity(self, value, expected):
        assert round_half_up(value) == expected


class TestComputeSummary:
    def test_empty_input(self):
        summary = compute_summary("p1", [])

        assert summary.item_id == "p1"
        assert summary.average_rating == 0
        assert summary.total_reviews == 0
        assert summary.rating_counts == {"1": 0, "2": 0, "3": 0, "4": 0, "5": 0}

    def test_single_review(self, make_review):
        summary = compute_summary("p1", [make_review(rating=4)])

        assert summary.average_rating == 4
        assert summary.total_reviews == 1
        assert summary.rating_counts == {"1": 0, "2": 0, "3": 0, "4": 1, "5": 0}

    def test_average_is_not_rounded(self, make_review):
        reviews = [make_review(rating=r) for r in (5, 4, 4)]
        summary = compute_summary("p1", reviews)

        assert summary.average_rating == pytest.approx(13 / 3)
        assert summary.rating_counts["4"] == 2
        assert summary.rating_counts["5"] == 1

    def test_fractional_ratings_bucket_by_half_up(self, make_review):
        reviews = [make_review(rating=r) for r in (3.5, 2.4, 4.5)]
        summary = compute_summary("p1", reviews)

        assert summary.rating_counts == {"1": 0, "2": 1, "3": 0, "4": 1, "5": 1}

    def test_counts_sum_to_total(self, make_review):
        ratings = [1, 2, 2, 3, 3.7, 4, 4.5, 5, 5, 1.2]
        summary = compute_summary("p1", [make_review(rating=r) for r in ratings])

        assert sum(summary.rating_counts.values()) == summary.total_reviews == len(ratings)

    def test_out_of_range_ratings_get_their_own_bucket(self, make_review):
        reviews = [make_review(rating=r) for r in (0, 6, 5)]
        summary = compute_summary("p1", reviews)

        assert summary.rating_counts["0"] == 1
        assert summary.rating_counts["6"] == 1
        assert summary.rating_counts["5"] == 1
        assert sum(summary.rating_counts.values()) == 3

    def test_order_independent(self, make_review):
        reviews = [make_review(rating=r) for r in (1, 3, 5, 2)]

        forward = compute_summary("p1", reviews)
        backward = compute_summary("p1", list(reversed(reviews)))

        assert forward == backward
