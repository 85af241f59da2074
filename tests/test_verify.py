# tests/test_verify.py
from dataclasses import replace

from starregistry.chain.store import ChainStore
from starregistry.core.types import ViolationKind
from starregistry.verify.validator import ChainValidator


def create_test_chain(n_blocks=4):
    store = ChainStore(clock=lambda: 1700000000)
    for i in range(n_blocks):
        store.append({"address": f"addr{i % 2}", "message": f"m{i}", "star": {"story": f"Star #{i}"}})
    return list(store.get_chain())


def test_valid_chain():
    chain = create_test_chain(6)
    result = ChainValidator().validate(chain)
    assert result.is_valid is True
    assert len(result.violations) == 0


def test_tamper_payload():
    chain = create_test_chain(5)
    tampered = chain.copy()
    tampered[2] = replace(tampered[2], payload=tampered[4].payload)

    violations = ChainValidator().find_violations(tampered)
    kinds = {(v.kind, v.height) for v in violations}
    assert (ViolationKind.SELF_HASH_MISMATCH, 2) in kinds
    assert (ViolationKind.BROKEN_LINK, 3) in kinds


def test_tamper_genesis():
    chain = create_test_chain(2)
    tampered = chain.copy()
    tampered[0] = replace(tampered[0], timestamp=0)

    violations = ChainValidator().find_violations(tampered)
    assert any(v.height == 0 and v.kind is ViolationKind.SELF_HASH_MISMATCH for v in violations)


def test_broken_hash_link():
    chain = create_test_chain(5)
    tampered = chain.copy()
    tampered[3] = replace(tampered[3], previous_hash="deadbeef" * 8)

    violations = ChainValidator().find_violations(tampered)
    assert any(v.kind is ViolationKind.BROKEN_LINK and v.height == 3 for v in violations)
    # previous_hash is hashed too, so the block no longer matches its own hash either
    assert any(v.kind is ViolationKind.SELF_HASH_MISMATCH and v.height == 3 for v in violations)


def test_rehashed_tampered_block_still_breaks_link():
    chain = create_test_chain(4)
    tampered = chain.copy()
    forged = replace(tampered[1], payload=tampered[2].payload)
    tampered[1] = replace(forged, hash=forged.compute_hash())

    violations = ChainValidator().find_violations(tampered)
    assert [(v.kind, v.height) for v in violations] == [(ViolationKind.BROKEN_LINK, 2)]


def test_wrong_height():
    chain = create_test_chain(4)
    tampered = chain.copy()
    tampered[2] = replace(tampered[2], height=99)

    violations = ChainValidator().find_violations(tampered)
    assert any("Height mismatch" in v.message and v.height == 2 for v in violations)


def test_reports_every_violation():
    chain = create_test_chain(6)
    tampered = chain.copy()
    tampered[1] = replace(tampered[1], hash="00" * 32)
    tampered[4] = replace(tampered[4], hash="11" * 32)

    heights = {v.height for v in ChainValidator().find_violations(tampered)}
    assert heights == {1, 4}


def test_empty_chain_is_valid():
    assert ChainValidator().validate([]).is_valid
