"""Tests for CSV batch ingestion, pipeline wiring and the CLI"""

import json
import pytest
from unittest.mock import MagicMock
from sms_pipeline.constants import UNKNOWN_SENDER
from sms_pipeline.demo.csv_message_loader import MessageCsvLoader
from sms_pipeline.pipeline.factory import build_extractors, build_worker
from sms_pipeline.registry.account_registry import AccountRegistry
from sms_pipeline.registry.transaction_store import InMemoryTransactionStore
from sms_pipeline.utils.errors import ConfigurationError

CSV_ROWS = [
    "body,address,date",
    '"Your account XXXX1234 has been debited with Rs.500.00 on 15-Jan-24 at AMAZON via UPI. Txn ID: 123456789",VM-HDFCBK,1705312800000',
    '"Rs.2000 credited to your SBI account XXXX5678 on 15-Jan-24. Ref: SAL123456",,2024-01-15T10:00:00Z',
    '"",AD-EMPTY,1705312800000',
    '"Your OTP is 123456 for login",AD-OTP,1705312800000',
    '"Rs.50.00 debited from your account XXXX1234 at CHAI POINT on 15-Jan-24",VM-HDFCBK,1705312800000',
]

CONFIG = {
    "version": "1.0",
    "preprocessor": {"extra_sensitive_keywords": []},
    "extraction": {"order": ["cloud", "pattern"], "cloud": {"enabled": False}},
    "auto_tagger": {"enabled": True, "threshold": 100, "category": "Low Value"},
    "accounts": [
        {"id": "acc_hdfc", "display_name": "Primary", "institution_name": "HDFC Bank", "account_number_tail": "XXXX1234"},
        {"id": "acc_sbi", "display_name": "Salary", "institution_name": "SBI", "account_number_tail": 5678},
    ],
}


@pytest.fixture
def sms_csv(tmp_path):
    path = tmp_path / "sms_export.csv"
    path.write_text("\n".join(CSV_ROWS) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def config_file(tmp_path):
    import yaml

    path = tmp_path / "pipeline.yaml"
    path.write_text(yaml.safe_dump(CONFIG), encoding="utf-8")
    return path


def test_csv_loader_yields_messages(sms_csv):
    """Test rows become RawMessages and empty bodies are skipped"""
    messages = list(MessageCsvLoader(str(sms_csv)))

    assert len(messages) == 4
    assert messages[0].sender_address == "VM-HDFCBK"
    assert messages[0].received_at == 1705312800000
    # Missing address falls back; ISO dates are converted to epoch millis
    assert messages[1].sender_address == UNKNOWN_SENDER
    assert messages[1].received_at == 1705312800000


def test_csv_loader_limit(sms_csv):
    assert len(list(MessageCsvLoader(str(sms_csv)).iter_messages(limit=2))) == 2


def test_csv_loader_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        MessageCsvLoader(str(tmp_path / "nope.csv"))


def test_csv_loader_missing_body_column(tmp_path):
    path = tmp_path / "bad.csv"
    path.write_text("text,address\nhello,AD-X\n", encoding="utf-8")

    with pytest.raises(ValueError):
        list(MessageCsvLoader(str(path)))


def test_registry_from_config():
    registry = AccountRegistry.from_config(CONFIG["accounts"])

    assert [a.id for a in registry.list_active_accounts()] == ["acc_hdfc", "acc_sbi"]
    assert registry.find_by_tail_digits("5678")[0].account_number_tail == "5678"


def test_registry_from_config_invalid_entry():
    with pytest.raises(ConfigurationError):
        AccountRegistry.from_config([{"id": "x", "display_name": "No institution"}])


def test_build_extractors_order():
    extractors = build_extractors(CONFIG)
    assert [e.name for e in extractors] == ["cloud", "pattern"]
    assert extractors[0].is_available() is False


def test_build_extractors_unknown_name():
    config = dict(CONFIG, extraction={"order": ["pattern", "regex-v2"]})
    with pytest.raises(ConfigurationError):
        build_extractors(config)


def test_build_worker_with_injected_cloud_client():
    config = dict(CONFIG, extraction={"cloud": {"enabled": True}})
    worker = build_worker(config, store=InMemoryTransactionStore(), cloud_client=MagicMock())

    assert worker.coordinator.get_processing_status().cloud_available is True
    worker.coordinator.close()


def test_batch_run(sms_csv):
    """Test a full batch through the worker with the retry handler"""
    from sms_pipeline.main import run_batch

    store = InMemoryTransactionStore()
    worker = build_worker(CONFIG, store=store)
    summary = run_batch(worker, str(sms_csv))
    worker.coordinator.close()

    assert summary == {"stored": 3, "skipped": 1, "duplicate": 0, "failed": 0}
    assert store.count() == 3


def test_cli_process(config_file, capsys, monkeypatch):
    from sms_pipeline.main import main

    monkeypatch.setenv("STORE_BACKEND", "memory")
    exit_code = main([
        "--config", str(config_file),
        "process", "Rs.2000 credited to your SBI account XXXX5678 on 15-Jan-24",
        "--sender", "AD-SBIINB"
    ])

    assert exit_code == 0
    output = json.loads(capsys.readouterr().out)
    assert output["direction"] == "CREDIT"
    assert output["account_id"] == "acc_sbi"


def test_cli_process_not_a_transaction(config_file, capsys, monkeypatch):
    from sms_pipeline.main import main

    monkeypatch.setenv("STORE_BACKEND", "memory")
    main(["--config", str(config_file), "process", "Your OTP is 123456 for login"])

    assert json.loads(capsys.readouterr().out) == {"isTransaction": False}


def test_cli_status(config_file, capsys, monkeypatch):
    from sms_pipeline.main import main

    monkeypatch.setenv("STORE_BACKEND", "memory")
    assert main(["--config", str(config_file), "status"]) == 0

    status = json.loads(capsys.readouterr().out)
    assert status == {"cloud_available": False, "pattern_fallback_available": True}
