"""Unit tests for ledger module.

Functions tested: append, compute_merkle_root, anchor, verify, get_stats,
export_ledger, reset, LedgerStore, emitters
"""
import dataclasses
import json
import logging
import threading
import time
from datetime import datetime, timedelta, timezone

import pytest

from spaceproof.core.constants import GENESIS
from spaceproof.core.receipt import EncodingError, Receipt, ReceiptFormatError, parse_receipt_line
from spaceproof.ledger.chain import ReceiptLedger
from spaceproof.ledger.emit import (
    emit_artifact_receipt,
    emit_mode_switch_receipt,
    format_receipt_for_display,
    log_receipt,
)
from spaceproof.ledger.store import LedgerStore
from spaceproof.ledger.verify import (
    VERIFY_SCHEMA,
    VIOLATION_LINK,
    VIOLATION_PAYLOAD,
    verify_chain,
    verify_export,
)


def tamper(ledger: ReceiptLedger, index: int, **changes) -> None:
    """Rewrite a stored receipt out-of-band."""
    ledger._receipts[index] = dataclasses.replace(ledger[index], **changes)


class TestLedgerAppend:
    """Tests for append and chain construction."""

    def test_first_receipt_links_to_genesis(self, ledger):
        receipt = ledger.append("demo_init", {"version": "1.0"})

        assert receipt.prev_hash == GENESIS
        assert ledger.last_receipt is receipt

    def test_receipts_link_to_previous_payload_hash(self, populated_ledger):
        for i in range(1, len(populated_ledger)):
            assert populated_ledger[i].prev_hash == populated_ledger[i - 1].payload_hash

    def test_receipt_fields(self, ledger, hasher):
        payload = {"component_id": "CFT-00001", "entropy": 0.71}
        receipt = ledger.append("terrestrial_verification", payload)

        assert receipt.receipt_type == "terrestrial_verification"
        assert receipt.tenant_id == "test_tenant"
        assert receipt.payload == payload
        assert receipt.payload_hash == hasher.hash(payload)
        assert receipt.ts == "2025-01-01T00:00:00Z"

    def test_any_receipt_type_accepted(self, ledger):
        ledger.append("not_a_known_type", {})
        assert ledger[0].receipt_type == "not_a_known_type"

    def test_length_grows_by_one(self, populated_ledger):
        before = list(populated_ledger.receipts)
        populated_ledger.append("extra", {"n": 1})

        assert len(populated_ledger) == len(before) + 1
        assert list(populated_ledger.receipts[:-1]) == before

    def test_caller_mutation_does_not_reach_ledger(self, ledger):
        payload = {"nested": {"value": 1}}
        ledger.append("event", payload)
        payload["nested"]["value"] = 2

        assert ledger[0].payload == {"nested": {"value": 1}}
        assert ledger.verify().valid

    def test_encoding_error_leaves_ledger_untouched(self, populated_ledger):
        before = populated_ledger.receipts

        with pytest.raises(EncodingError):
            populated_ledger.append("bad", {"score": float("nan")})

        assert populated_ledger.receipts == before

    def test_unencodable_text_rejected(self, populated_ledger):
        before = populated_ledger.receipts

        with pytest.raises(EncodingError):
            populated_ledger.append("bad", {"name": "\ud800"})

        assert populated_ledger.receipts == before

    def test_non_mapping_payload_rejected(self, ledger):
        with pytest.raises(EncodingError):
            ledger.append("bad", ["not", "a", "mapping"])
        assert ledger.is_empty

    def test_timestamps_never_decrease(self):
        base = datetime(2025, 1, 1, tzinfo=timezone.utc)
        times = iter([base, base - timedelta(seconds=5), base + timedelta(seconds=1)])
        ledger = ReceiptLedger(clock=lambda: next(times))

        stamps = [ledger.append("tick", {"i": i}).ts for i in range(3)]

        assert stamps == sorted(stamps)
        assert stamps[0] == stamps[1]

    def test_receipt_is_frozen(self, ledger):
        receipt = ledger.append("event", {})
        with pytest.raises(dataclasses.FrozenInstanceError):
            receipt.prev_hash = "forged"


class TestLedgerVerify:
    """Tests for chain verification."""

    @pytest.mark.parametrize("count", [0, 1, 2, 7])
    def test_untampered_chain_is_valid(self, ledger, count):
        for i in range(count):
            ledger.append("event", {"i": i})

        result = ledger.verify()

        assert result.valid
        assert result.total_receipts == count
        assert result.merkle_root == ledger.compute_merkle_root()
        assert result.violation is None

    def test_tampered_prev_hash_detected(self, populated_ledger):
        original = populated_ledger[3].prev_hash
        tamper(populated_ledger, 3, prev_hash="0" * 64)

        result = populated_ledger.verify()

        assert not result.valid
        assert result.violation.index == 3
        assert result.violation.kind == VIOLATION_LINK
        assert result.violation.expected == original
        assert result.violation.found == "0" * 64
        assert result.violation.message == "Chain break at index 3"

    def test_tampered_payload_hash_detected(self, populated_ledger):
        tamper(populated_ledger, 2, payload_hash="f" * 64)

        result = populated_ledger.verify()

        assert not result.valid
        assert result.violation.index == 2
        assert result.violation.kind == VIOLATION_PAYLOAD

    def test_tampered_payload_hash_breaks_next_link(self, populated_ledger):
        tamper(populated_ledger, 2, payload_hash="f" * 64)

        result = populated_ledger.verify(check_payloads=False)

        assert not result.valid
        assert result.violation.index == 3
        assert result.violation.kind == VIOLATION_LINK

    def test_tampered_genesis_detected(self, populated_ledger):
        tamper(populated_ledger, 0, prev_hash="forged")

        result = populated_ledger.verify(check_payloads=False)

        assert not result.valid
        assert result.violation.index == 0
        assert result.violation.expected == GENESIS

    def test_payload_content_tamper_needs_payload_check(self, populated_ledger):
        populated_ledger[1].payload["seq"] = 99

        assert populated_ledger.verify(check_payloads=False).valid
        result = populated_ledger.verify(check_payloads=True)
        assert not result.valid
        assert result.violation.index == 1
        assert result.violation.message == "Payload tampered at index 1"

    def test_default_follows_feature_flag(self, populated_ledger, monkeypatch):
        import spaceproof.config.features as features
        populated_ledger[1].payload["seq"] = 99

        monkeypatch.setattr(features, "FEATURE_PAYLOAD_INTEGRITY_CHECK", False)
        assert populated_ledger.verify().valid

        monkeypatch.setattr(features, "FEATURE_PAYLOAD_INTEGRITY_CHECK", True)
        assert not populated_ledger.verify().valid

    def test_broken_chain_stays_queryable(self, populated_ledger):
        tamper(populated_ledger, 2, prev_hash="x")

        stats = populated_ledger.get_stats()

        assert stats["chain_valid"] is False
        assert stats["total_receipts"] == 5
        assert len(populated_ledger.export_ledger()) == 5

    def test_result_to_dict(self, populated_ledger):
        tamper(populated_ledger, 4, prev_hash="x")
        data = populated_ledger.verify().to_dict()

        assert data["valid"] is False
        assert data["violation"]["index"] == 4
        assert data["violation"]["message"] == "Chain break at index 4"
        json.dumps(data)

    @pytest.mark.parametrize("tampered", [False, True])
    def test_result_matches_schema(self, populated_ledger, tampered):
        if tampered:
            tamper(populated_ledger, 1, prev_hash="x")
        data = populated_ledger.verify().to_dict()
        types = {"boolean": bool, "integer": int, "string": str, "object": dict, "null": type(None)}

        assert set(data) == set(VERIFY_SCHEMA["required"])
        for key, spec in VERIFY_SCHEMA["properties"].items():
            allowed = spec["type"] if isinstance(spec["type"], list) else [spec["type"]]
            assert isinstance(data[key], tuple(types[name] for name in allowed)), key


class TestLedgerMerkle:
    """Tests for compute_merkle_root."""

    def test_empty_ledger_root(self, ledger, hasher):
        assert ledger.compute_merkle_root() == hasher.hash("empty")

    def test_single_receipt_root(self, ledger, hasher):
        receipt = ledger.append("event", {"i": 0})
        assert ledger.compute_merkle_root([receipt]) == hasher.hash_chain(receipt.payload_hash, receipt.payload_hash)

    def test_root_is_read_only_and_stable(self, populated_ledger):
        before = populated_ledger.receipts
        assert populated_ledger.compute_merkle_root() == populated_ledger.compute_merkle_root()
        assert populated_ledger.receipts == before

    def test_sub_batch(self, populated_ledger):
        batch = list(populated_ledger.receipts[:2])
        assert populated_ledger.compute_merkle_root(batch) != populated_ledger.compute_merkle_root()


class TestLedgerAnchor:
    """Tests for anchoring."""

    def test_anchor_receipt_payload(self, populated_ledger):
        expected_root = populated_ledger.compute_merkle_root()
        receipt = populated_ledger.anchor()

        assert receipt.receipt_type == "anchor"
        assert receipt.payload["merkle_root"] == expected_root
        assert receipt.payload["batch_size"] == 5
        assert receipt.payload["hash_algorithms"] == ["SHA256", "BLAKE3"]
        assert receipt.prev_hash == populated_ledger[4].payload_hash

    def test_anchor_history(self, populated_ledger):
        receipt = populated_ledger.anchor()
        (anchor,) = populated_ledger.anchors

        assert anchor.root == receipt.payload["merkle_root"]
        assert anchor.batch_size == 5
        assert anchor.timestamp == receipt.ts
        assert anchor.receipt_index == 5

    def test_anchors_over_same_batch_are_distinct(self, populated_ledger):
        batch = list(populated_ledger.receipts)

        first = populated_ledger.anchor(batch)
        second = populated_ledger.anchor(batch)

        assert first.payload["merkle_root"] == second.payload["merkle_root"]
        assert first.payload_hash != second.payload_hash
        assert second.prev_hash == first.payload_hash
        assert populated_ledger.verify().valid

    def test_distinct_even_with_frozen_clock(self):
        moment = datetime(2025, 1, 1, tzinfo=timezone.utc)
        ledger = ReceiptLedger(clock=lambda: moment)
        ledger.append("event", {})
        batch = list(ledger.receipts)

        assert ledger.anchor(batch).payload_hash != ledger.anchor(batch).payload_hash

    def test_anchor_empty_ledger(self, ledger, hasher):
        receipt = ledger.anchor()

        assert receipt.payload["merkle_root"] == hasher.hash("empty")
        assert receipt.payload["batch_size"] == 0
        assert receipt.prev_hash == GENESIS


class TestLedgerStats:
    """Tests for get_stats."""

    def test_counts_by_type(self, ledger):
        for rtype in ["a", "b", "a"]:
            ledger.append(rtype, {"t": rtype})

        stats = ledger.get_stats()

        assert stats["by_type"] == {"a": 2, "b": 1}
        assert stats["total_receipts"] == 3
        assert stats["last_receipt_ts"] == ledger[2].ts
        assert stats["merkle_root"] == ledger.compute_merkle_root()
        assert stats["chain_valid"] is True
        assert stats["tenant_id"] == "test_tenant"

    def test_empty_stats(self, ledger, hasher):
        stats = ledger.get_stats()

        assert stats["total_receipts"] == 0
        assert stats["by_type"] == {}
        assert stats["last_receipt_ts"] is None
        assert stats["merkle_root"] == hasher.hash("empty")
        assert stats["chain_valid"] is True


class TestLedgerReset:
    """Tests for reset."""

    def test_reset_clears_everything(self, populated_ledger):
        populated_ledger.anchor()
        populated_ledger.reset()

        assert populated_ledger.get_stats()["total_receipts"] == 0
        assert populated_ledger.anchors == ()
        assert populated_ledger.is_empty

    def test_append_after_reset_starts_at_genesis(self, populated_ledger):
        populated_ledger.reset()
        receipt = populated_ledger.append("demo_init", {})

        assert receipt.prev_hash == GENESIS

    def test_reset_empty_is_noop(self, ledger):
        ledger.reset()
        assert ledger.is_empty


class TestLedgerExport:
    """Tests for export, replay and persistence."""

    def test_export_one_line_per_receipt(self, populated_ledger):
        lines = populated_ledger.export_ledger()

        assert len(lines) == 5
        for line, receipt in zip(lines, populated_ledger.receipts):
            assert "\n" not in line
            assert json.loads(line)["payload_hash"] == receipt.payload_hash

    def test_export_replays_through_verify(self, populated_ledger):
        populated_ledger.anchor()
        result = verify_export(populated_ledger.export_ledger())

        assert result.valid
        assert result.total_receipts == 6
        assert result.merkle_root == populated_ledger.compute_merkle_root()

    def test_replay_detects_edited_line(self, populated_ledger):
        lines = populated_ledger.export_ledger()
        edited = json.loads(lines[2])
        edited["payload"]["seq"] = 42
        lines[2] = json.dumps(edited)

        result = verify_export(lines)

        assert not result.valid
        assert result.violation.index == 2

    def test_replay_reports_unencodable_edit(self, populated_ledger):
        lines = populated_ledger.export_ledger()
        edited = json.loads(lines[1])
        edited["payload"]["detail"] = "\ud800"
        lines[1] = json.dumps(edited)

        result = verify_export(lines)

        assert not result.valid
        assert result.violation.index == 1
        assert result.violation.kind == VIOLATION_PAYLOAD

    def test_replay_detects_deleted_line(self, populated_ledger):
        lines = populated_ledger.export_ledger()
        del lines[1]

        result = verify_export(lines, check_payloads=False)

        assert not result.valid
        assert result.violation.index == 1

    def test_malformed_line_raises(self):
        with pytest.raises(ReceiptFormatError):
            parse_receipt_line("{not json")
        with pytest.raises(ReceiptFormatError):
            parse_receipt_line(json.dumps({"receipt_type": "x"}))

    def test_deeply_nested_line_raises(self):
        with pytest.raises(ReceiptFormatError):
            parse_receipt_line("[" * 100_000 + "]" * 100_000)

    def test_store_round_trip(self, populated_ledger, tmp_path):
        store = LedgerStore(tmp_path / "ledger" / "receipts.jsonl")
        assert store.write_all(populated_ledger.export_ledger()) == 5

        receipts = store.read_all()

        assert receipts == list(populated_ledger.receipts)
        assert verify_chain(receipts).valid
        assert len(store.query(lambda r: r.receipt_type == "verification")) == 3

    def test_store_as_observer(self, ledger, tmp_path):
        store = LedgerStore(tmp_path / "mirror.jsonl")
        ledger.subscribe(store.append)

        for i in range(3):
            ledger.append("event", {"i": i})

        assert [r.payload_hash for r in store.read_all()] == [r.payload_hash for r in ledger]


class TestObservers:
    """Append events reach subscribed observers."""

    def test_observer_sees_each_receipt(self, ledger):
        seen: list[Receipt] = []
        ledger.subscribe(seen.append)

        ledger.append("event", {})
        ledger.anchor()

        assert [r.receipt_type for r in seen] == ["event", "anchor"]
        assert seen[-1] is ledger.last_receipt

    def test_unsubscribe(self, ledger):
        seen: list[Receipt] = []
        ledger.subscribe(seen.append)
        ledger.unsubscribe(seen.append)

        ledger.append("event", {})

        assert seen == []

    def test_log_receipt_observer(self, ledger, caplog):
        ledger.subscribe(log_receipt)

        with caplog.at_level(logging.INFO, logger="spaceproof.ledger"):
            receipt = ledger.append("mode_switch", {"to": "orbital"})

        assert "[RECEIPT] mode_switch" in caplog.text
        assert receipt.payload_hash[:24] in caplog.text

    def test_observer_can_read_ledger(self, ledger):
        lengths: list[int] = []
        ledger.subscribe(lambda receipt: lengths.append(len(ledger)))

        ledger.append("event", {})
        ledger.anchor()

        assert lengths == [1, 2]

    def test_concurrent_appends_reach_observers_in_chain_order(self, ledger, tmp_path):
        store = LedgerStore(tmp_path / "mirror.jsonl")
        first_seen = threading.Event()

        def slow_observer(receipt):
            if receipt.payload["i"] == 0:
                first_seen.set()
                time.sleep(0.05)

        ledger.subscribe(slow_observer)
        ledger.subscribe(store.append)

        writer = threading.Thread(target=ledger.append, args=("event", {"i": 0}))
        writer.start()
        assert first_seen.wait(timeout=5)
        ledger.append("event", {"i": 1})
        writer.join()

        assert ledger.verify().valid
        assert [r.payload["i"] for r in store.read_all()] == [0, 1]
        assert verify_export(store.read_lines()).valid


class TestEmitters:
    """Typed emitters and display formatting."""

    def test_mode_switch_receipt(self, ledger):
        receipt = emit_mode_switch_receipt(ledger, "terrestrial", "orbital", {"node_id": "ORBITAL-NODE-7"})

        assert receipt.receipt_type == "mode_switch"
        assert receipt.payload["thermal_baseline"] == "-270C"
        assert receipt.payload["altitude_km"] == 0

    def test_artifact_receipt_pins_chain_state(self, populated_ledger):
        root = populated_ledger.compute_merkle_root()
        receipt = emit_artifact_receipt(populated_ledger, {
            "type": "verification_report",
            "component_id": "CFT-00001",
            "mode": "orbital",
            "confidence": 0.99,
            "roi_value": 420000,
        })

        assert receipt.payload["merkle_root"] == root
        assert receipt.payload["receipt_count"] == 5

    def test_format_for_display(self, ledger):
        first = ledger.append("a", {})
        second = ledger.append("b", {"x": 1})

        shown_first = format_receipt_for_display(first)
        shown_second = format_receipt_for_display(second)

        assert shown_first["chain_link"] == GENESIS
        assert shown_first["hash"] == first.payload_hash[:24] + "..."
        assert shown_second["chain_link"] == first.payload_hash[:12] + "..."
        assert shown_second["type"] == "b"
