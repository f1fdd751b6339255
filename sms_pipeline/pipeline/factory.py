"""Wire the pipeline components from configuration"""

from decimal import Decimal
from typing import Any, Dict, List, Optional
from sms_pipeline.constants import LOW_VALUE_THRESHOLD, TransactionCategory
from sms_pipeline.extractors.base import ExtractorStrategy
from sms_pipeline.extractors.cloud_extractor import CloudExtractor
from sms_pipeline.extractors.pattern_extractor import PatternExtractor
from sms_pipeline.pipeline.account_matcher import AccountMatcher
from sms_pipeline.pipeline.coordinator import ExtractionCoordinator
from sms_pipeline.pipeline.preprocessor import Preprocessor
from sms_pipeline.pipeline.worker import TransactionWorker
from sms_pipeline.registry.account_registry import AccountRegistry
from sms_pipeline.registry.transaction_store import create_transaction_store
from sms_pipeline.utils.config_loader import get_section
from sms_pipeline.utils.errors import ConfigurationError


def build_extractors(config: Dict[str, Any], cloud_client=None) -> List[ExtractorStrategy]:
    """
    Extractor chain in the order given by extraction.order (default cloud, pattern)

    Raises:
        ConfigurationError: On an unknown extractor name
    """
    extraction = get_section(config, "extraction")
    order = extraction.get("order") or ["cloud", "pattern"]

    extractors: List[ExtractorStrategy] = []
    for name in order:
        if name == "cloud":
            cloud_config = get_section(config, "extraction", "cloud")
            extractors.append(CloudExtractor.from_config(cloud_config, client=cloud_client))
        elif name == "pattern":
            extractors.append(PatternExtractor())
        else:
            raise ConfigurationError(f"Unknown extractor in extraction.order: {name}")

    return extractors


def build_coordinator(
    config: Dict[str, Any],
    registry: AccountRegistry,
    cloud_client=None
) -> ExtractionCoordinator:
    preprocessor_config = get_section(config, "preprocessor")
    extraction = get_section(config, "extraction")

    return ExtractionCoordinator(
        preprocessor=Preprocessor(preprocessor_config.get("extra_sensitive_keywords")),
        extractors=build_extractors(config, cloud_client=cloud_client),
        account_matcher=AccountMatcher(registry),
        max_workers=int(extraction.get("max_workers", 4))
    )


def build_worker(
    config: Dict[str, Any],
    store=None,
    registry: Optional[AccountRegistry] = None,
    cloud_client=None,
    listeners=None
) -> TransactionWorker:
    """Full caller-side pipeline: registry, coordinator, store and auto-tagger"""
    if registry is None:
        registry = AccountRegistry.from_config(config.get("accounts") or [])
    tagger_config = get_section(config, "auto_tagger")

    threshold = Decimal(str(tagger_config.get("threshold", LOW_VALUE_THRESHOLD)))
    if not tagger_config.get("enabled", True):
        threshold = Decimal("0")

    return TransactionWorker(
        coordinator=build_coordinator(config, registry, cloud_client=cloud_client),
        store=store if store is not None else create_transaction_store(),
        registry=registry,
        low_value_threshold=threshold,
        low_value_category=tagger_config.get("category") or TransactionCategory.LOW_VALUE,
        listeners=listeners
    )
