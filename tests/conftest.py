"""Shared fixtures for pipeline tests"""

import pytest
from sms_pipeline.constants import AccountType
from sms_pipeline.extractors.cloud_extractor import CloudExtractor
from sms_pipeline.extractors.pattern_extractor import PatternExtractor
from sms_pipeline.models.account import Account
from sms_pipeline.pipeline.account_matcher import AccountMatcher
from sms_pipeline.pipeline.coordinator import ExtractionCoordinator
from sms_pipeline.pipeline.preprocessor import Preprocessor
from sms_pipeline.registry.account_registry import AccountRegistry

RECEIVED_AT = 1705312800000


@pytest.fixture
def registry():
    """Registry with HDFC and SBI savings accounts and an ICICI card"""
    return AccountRegistry([
        Account(
            id="acc_hdfc",
            display_name="Primary Savings",
            institution_name="HDFC Bank",
            account_number_tail="XXXX1234",
        ),
        Account(
            id="acc_sbi",
            display_name="Salary Account",
            institution_name="SBI",
            account_number_tail="5678",
        ),
        Account(
            id="acc_icici_card",
            display_name="Travel Card",
            institution_name="ICICI Bank",
            account_number_tail="9012",
            account_type=AccountType.CREDIT_CARD,
            match_keywords=frozenset({"amazon pay"}),
        ),
    ])


@pytest.fixture
def pattern_coordinator(registry):
    """Coordinator with the cloud tier disabled"""
    coordinator = ExtractionCoordinator(
        preprocessor=Preprocessor(),
        extractors=[CloudExtractor(enabled=False), PatternExtractor()],
        account_matcher=AccountMatcher(registry),
        clock=lambda: RECEIVED_AT + 1000,
    )
    yield coordinator
    coordinator.close()
