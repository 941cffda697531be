"""Unit tests for lender eligibility, option pricing and ranking"""

import dataclasses

import pytest
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from financing_gateway.domain import amortization
from financing_gateway.domain.exceptions import InvalidInputError
from financing_gateway.domain.matching import (
    compare_financing,
    comparison_score,
    filter_lenders,
    lender_eligibility,
    price_option,
    product_eligibility,
    rank_options,
)
from financing_gateway.domain.models import RateType


def test_lender_eligibility_checks_score_and_ltv(make_lender):
    lender = make_lender(min_credit_score=640, max_ltv_pct=90)

    assert lender_eligibility(lender, 700, 85.0) == []
    assert lender_eligibility(lender, 620, 85.0) == ["MIN_CREDIT_SCORE"]
    assert lender_eligibility(lender, 700, 92.0) == ["MAX_LTV"]
    assert lender_eligibility(lender, 620, 92.0) == ["MIN_CREDIT_SCORE", "MAX_LTV"]


def test_product_eligibility_uses_down_payment_percentage(make_product):
    """Test the window compares down payment as a percentage of the loan"""
    product = make_product(min_down_pct=5, max_down_pct=20)

    assert product_eligibility(product, 200000, 10000) == []  # 5%
    assert product_eligibility(product, 200000, 40000) == []  # 20%
    assert product_eligibility(product, 200000, 9000) == ["DOWN_PAYMENT_WINDOW"]  # 4.5%
    assert product_eligibility(product, 200000, 50000) == ["DOWN_PAYMENT_WINDOW"]  # 25%


def test_product_eligibility_checks_requested_term(make_product):
    product = make_product(term=15, min_down_pct=5)

    assert product_eligibility(product, 200000, 40000) == []
    assert product_eligibility(product, 200000, 40000, term_years=15) == []
    assert product_eligibility(product, 200000, 40000, term_years=30) == ["TERM_RANGE"]
    assert product_eligibility(product, 200000, 1000, term_years=30) == ["DOWN_PAYMENT_WINDOW", "TERM_RANGE"]


def test_comparison_score_deductions(make_lender):
    fast = make_lender(rating=4.8, processing_time="15-21 days")
    slow = make_lender(rating=4.0, processing_time="30-45 days")

    assert comparison_score(4.5, fast) == 100
    assert comparison_score(5.0, fast) == pytest.approx(90)
    # 0.5 stars below baseline and slow processing
    assert comparison_score(4.5, slow) == pytest.approx(90)


def test_comparison_score_processing_threshold(make_lender):
    """Test the slow-processing penalty applies only when 30 days is quoted"""
    assert comparison_score(4.5, make_lender(processing_time="21-30 days")) == 95
    assert comparison_score(4.5, make_lender(processing_time="10-29 days")) == 100
    assert comparison_score(4.5, make_lender(processing_time="45-60 days")) == 100
    assert comparison_score(4.5, make_lender(processing_time="31-45 days")) == 100
    assert comparison_score(4.5, make_lender(processing_time="60 days")) == 100
    assert comparison_score(4.5, make_lender(processing_time="Varies")) == 100


def test_price_option_fields(make_lender, make_product, origination_fee):
    product = make_product(product_id="fixed-15", term=15)
    lender = make_lender(lender_id="acme", fee_schedule=[origination_fee], products=[product])

    option = price_option(lender, product, 200000, 40000, 750, 75.0)

    assert option.id == "acme-fixed-15"
    assert option.term_years == 15
    assert option.interest_rate == pytest.approx(4.0)
    assert option.apr == pytest.approx(4.1)
    assert option.monthly_payment == pytest.approx(amortization.monthly_payment(200000, 4.0, 15))
    assert option.total_cost == pytest.approx(option.monthly_payment * 180 + 40000)
    assert option.closing_costs == pytest.approx(4000)
    assert option.lender_fees_total == pytest.approx(2000)
    assert [a.code for a in option.rate_quote.adjustments] == ["FIXED_15_YEAR"]


def test_price_option_rate_override(make_lender, make_product):
    product = make_product()
    option = price_option(make_lender(products=[product]), product, 200000, 40000, 600, 75.0, rate_override=6.25)

    assert option.interest_rate == 6.25
    assert option.monthly_payment == pytest.approx(amortization.monthly_payment(200000, 6.25, 30))
    assert option.rate_quote is None


def test_price_option_at_requested_term(make_lender, make_product):
    """Test a requested term inside the product range sets the priced term"""
    product = make_product(product_id="fixed-range")
    product = dataclasses.replace(product, min_term=10, max_term=30)

    option = price_option(make_lender(products=[product]), product, 200000, 40000, 750, 75.0, term_years=15)

    assert option.term_years == 15
    assert option.interest_rate == pytest.approx(4.0)
    assert option.monthly_payment == pytest.approx(amortization.monthly_payment(200000, 4.0, 15))


def test_rank_options_sorted_by_score(make_lender):
    lenders = [
        make_lender("slow", rating=4.0, processing_time="30-45 days"),
        make_lender("best", rating=4.9),
        make_lender("middle", rating=4.3),
    ]

    options = rank_options(300000, 60000, 750, 375000, lenders)

    assert [o.lender_id for o in options] == ["best", "middle", "slow"]
    scores = [o.comparison_score for o in options]
    assert scores == sorted(scores, reverse=True)


def test_rank_options_ties_keep_catalog_order(make_lender):
    """Test equal scores come back in catalog order"""
    lenders = [make_lender(lender_id) for lender_id in ("c", "a", "b", "d")]

    options = rank_options(300000, 60000, 750, 375000, lenders)

    assert [o.lender_id for o in options] == ["c", "a", "b", "d"]


def test_rank_options_skips_ineligible(make_lender, make_product):
    lenders = [
        make_lender("picky", min_credit_score=720),
        make_lender("low-ltv", max_ltv_pct=70),
        make_lender("narrow", products=[make_product(min_down_pct=30, max_down_pct=40)]),
        make_lender("open"),
    ]

    options = rank_options(300000, 60000, 700, 375000, lenders)

    assert [o.lender_id for o in options] == ["open"]


def test_rank_options_empty_is_not_an_error(make_lender):
    options = rank_options(300000, 60000, 500, 375000, [make_lender(min_credit_score=700)])
    assert options == []


def test_rank_options_filters_by_requested_term(make_lender, make_product):
    lender = make_lender(
        "acme",
        products=[make_product("fixed-30", term=30), make_product("fixed-15", term=15)],
    )

    any_term = rank_options(300000, 60000, 750, 375000, [lender])
    fifteen = rank_options(300000, 60000, 750, 375000, [lender], term_years=15)
    thirty = rank_options(300000, 60000, 750, 375000, [lender], term_years=30)

    assert [o.product_id for o in any_term] == ["fixed-30", "fixed-15"]
    assert [(o.product_id, o.term_years) for o in fifteen] == [("fixed-15", 15)]
    assert [(o.product_id, o.term_years) for o in thirty] == [("fixed-30", 30)]
    assert rank_options(300000, 60000, 750, 375000, [lender], term_years=20) == []


def test_rank_options_with_executor_matches_sequential(make_lender):
    lenders = [make_lender(f"lender-{i}", rating=4.0 + i / 10) for i in range(8)]

    sequential = rank_options(300000, 60000, 700, 375000, lenders)
    with ThreadPoolExecutor(max_workers=4) as executor:
        parallel = rank_options(300000, 60000, 700, 375000, lenders, executor=executor)

    assert parallel == sequential


@pytest.mark.parametrize(
    "loan, down, score, property_value",
    [(0, 0, 700, 375000), (300000, -1, 700, 375000), (300000, 0, 900, 375000), (300000, 0, 700, 0)],
)
def test_rank_options_rejects_invalid_input(make_lender, loan, down, score, property_value):
    with pytest.raises(InvalidInputError):
        rank_options(loan, down, score, property_value, [make_lender()])


def test_rank_options_rejects_non_positive_term(make_lender):
    with pytest.raises(InvalidInputError):
        rank_options(300000, 60000, 700, 375000, [make_lender()], term_years=0)


def test_rank_options_credit_adjustment_flows_into_rate(make_lender, make_product):
    lenders = [make_lender(products=[make_product(rate_type=RateType.FIXED, term=30)])]

    option = rank_options(300000, 60000, 600, 375000, lenders)[0]

    assert option.interest_rate == pytest.approx(5.5)
    assert option.comparison_score == pytest.approx(80)
    assert option.is_recommended is False


def test_filter_lenders(make_lender):
    lenders = [
        make_lender("small", min_loan_amount=50000, max_loan_amount=400000, locations=["Texas"]),
        make_lender("jumbo", min_loan_amount=750000, max_loan_amount=3000000, locations=["California"]),
        make_lender("regional", min_loan_amount=75000, max_loan_amount=800000, locations=["Oregon", "Washington"]),
    ]

    assert [lender.id for lender in filter_lenders(lenders, loan_amount_range=(500000, 600000))] == ["regional"]
    assert [lender.id for lender in filter_lenders(lenders, lender_ids=["jumbo", "small"])] == ["small", "jumbo"]
    assert [lender.id for lender in filter_lenders(lenders, locations=["washington"])] == ["regional"]
    assert len(filter_lenders(lenders)) == 3


def test_compare_financing_picks_top_option(make_lender):
    lenders = [make_lender("second", rating=4.2), make_lender("first", rating=4.9)]
    compared_at = datetime(2024, 6, 1, tzinfo=timezone.utc)

    comparison = compare_financing(300000, 60000, 750, 375000, lenders, compared_at=compared_at)

    assert comparison.best_option_id == "first-fixed-30"
    assert [o.lender_id for o in comparison.options] == ["first", "second"]
    assert comparison.compared_at == compared_at
    assert comparison.property_value == 375000


def test_compare_financing_without_options(make_lender):
    comparison = compare_financing(300000, 60000, 500, 375000, [make_lender(min_credit_score=700)])

    assert comparison.options == ()
    assert comparison.best_option_id is None
