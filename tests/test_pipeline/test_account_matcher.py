"""Unit tests for the account matcher and registry lookups"""

import pytest
from sms_pipeline.models.account import Account
from sms_pipeline.pipeline.account_matcher import AccountMatcher
from sms_pipeline.registry.account_registry import AccountRegistry


@pytest.fixture
def overlapping_registry():
    """Three accounts sharing the tail 1234, plus a unique and an inactive one"""
    return AccountRegistry([
        Account(id="a1", display_name="HDFC Savings", institution_name="HDFC Bank", account_number_tail="XXXX1234"),
        Account(id="a2", display_name="ICICI Current", institution_name="ICICI Bank", account_number_tail="001234"),
        Account(id="a3", display_name="SBI Salary", institution_name="SBI", account_number_tail="1234"),
        Account(id="a4", display_name="Axis Card", institution_name="Axis Bank", account_number_tail="5555"),
        Account(id="a5", display_name="Old Account", institution_name="PNB", account_number_tail="7777", is_active=False),
    ])


@pytest.fixture
def matcher(overlapping_registry):
    return AccountMatcher(overlapping_registry)


def test_single_tail_match(matcher):
    assert matcher.match("5555", None).id == "a4"


def test_tail_ambiguity_narrowed_by_hint(matcher):
    """Bank hint picks among accounts with the same tail"""
    assert matcher.match("1234", "ICICI").id == "a2"
    assert matcher.match("1234", "sbi").id == "a3"


def test_tail_ambiguity_without_hint_uses_first(matcher):
    assert matcher.match("1234", None).id == "a1"


def test_tail_ambiguity_hint_matches_none_degrades(matcher):
    """A hint that narrows to nothing falls back to the first tail match"""
    assert matcher.match("1234", "Kotak").id == "a1"


def test_bank_hint_only(matcher):
    assert matcher.match(None, "axis").id == "a4"


def test_unknown_tail_falls_back_to_hint(matcher):
    assert matcher.match("9999", "HDFC").id == "a1"


def test_no_match(matcher):
    assert matcher.match(None, None) is None
    assert matcher.match("9999", None) is None
    assert matcher.match("", "  ") is None


def test_inactive_accounts_never_match(matcher):
    assert matcher.match("7777", None) is None
    assert matcher.match(None, "PNB") is None


def test_registry_find_by_tail_digits(overlapping_registry):
    """Registration order is preserved"""
    ids = [a.id for a in overlapping_registry.find_by_tail_digits("1234")]
    assert ids == ["a1", "a2", "a3"]
    assert overlapping_registry.find_by_tail_digits("") == []


def test_registry_search_by_keyword_ranking():
    """Institution matches rank above display-name and keyword matches"""
    registry = AccountRegistry([
        Account(id="k1", display_name="Groceries", institution_name="ICICI Bank",
                account_number_tail="9012", match_keywords=frozenset({"amazon pay"})),
        Account(id="k2", display_name="Amazon Pay Wallet", institution_name="Amazon"),
        Account(id="k3", display_name="Amazon Shopping Card", institution_name="HDFC Bank"),
    ])

    assert [a.id for a in registry.search_by_keyword("amazon")] == ["k2", "k3", "k1"]
    assert [a.id for a in registry.search_by_keyword("Amazon Pay")] == ["k2", "k1"]
    assert registry.search_by_keyword("   ") == []


def test_registry_rejects_duplicate_ids():
    account = Account(id="dup", display_name="One", institution_name="SBI")
    registry = AccountRegistry([account])

    with pytest.raises(ValueError):
        registry.register(account)
