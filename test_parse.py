"""
Tests for candidate scanning and the event orchestrator.
Run: python3 test_parse.py
"""
import base64
import sys

# Ensure project root is on path
sys.path.insert(0, ".")

from chainstream.types import CallRecord, InnerCallGroup, TransactionMetadata, CompiledInstruction
from raydium.constants import EVENT_IX_TAG
from raydium.errors import IndexOutOfRange
from raydium.events import IncreaseLiquidityEvent, SwapEvent, UnknownEvent
from raydium.parse import leading_swap, parse_events, parse_log_events
from raydium.scanner import resolve, scan, scan_logs
from tx_factory import (
    ACCOUNT_A,
    ACCOUNT_B,
    PROGRAM,
    TOKEN_PROGRAM,
    cpi_payload,
    key,
    make_swap,
    make_tx,
    sample_event,
)


def expect_raises(exc_type, func, *args):
    try:
        func(*args)
    except exc_type as e:
        return e
    raise AssertionError(f"{func.__name__} did not raise {exc_type.__name__}")


# ══════════════════════════════════════════════════════════════
#  RESOLVER / SCANNER
# ══════════════════════════════════════════════════════════════


def test_resolve():
    keys = (PROGRAM, ACCOUNT_A)
    assert resolve(keys, 1) == ACCOUNT_A
    e = expect_raises(IndexOutOfRange, resolve, keys, 2)
    assert e.index == 2 and e.size == 2
    expect_raises(IndexOutOfRange, resolve, keys, -1)


def test_scan_only_self_invocations():
    swap = cpi_payload(make_swap())
    tx = make_tx([(0, swap), (3, b"transfer"), (0, b"\x01")],
                 account_keys=(PROGRAM, ACCOUNT_A, ACCOUNT_B, TOKEN_PROGRAM))
    candidates = scan(tx, PROGRAM)
    assert [c.source_order for c in candidates] == [(0, 0), (0, 2)]
    assert candidates[0].payload == swap


def test_scan_ignores_groups_from_other_outer_programs():
    tx = make_tx([(0, cpi_payload(make_swap()))],
                 account_keys=(PROGRAM, ACCOUNT_A, ACCOUNT_B, TOKEN_PROGRAM),
                 outer_program_index=3)
    assert scan(tx, PROGRAM) == []


def test_scan_orders_groups_by_outer_index():
    keys = (PROGRAM, ACCOUNT_A, ACCOUNT_B)
    tx = TransactionMetadata(
        signature="sig",
        account_keys=keys,
        instructions=(CompiledInstruction(0), CompiledInstruction(0)),
        inner_calls=(
            InnerCallGroup(1, (CallRecord(0, (), b"second"),)),
            InnerCallGroup(0, (CallRecord(0, (), b"first"),)),
        ),
    )
    assert [c.payload for c in scan(tx, PROGRAM)] == [b"first", b"second"]


def test_scan_bad_outer_index():
    tx = make_tx([], groups=(InnerCallGroup(5, ()),))
    expect_raises(IndexOutOfRange, scan, tx, PROGRAM)


def test_scan_bad_account_index():
    groups = (InnerCallGroup(0, (CallRecord(0, (1, 9), b"x"),)),)
    tx = make_tx([], groups=groups)
    expect_raises(IndexOutOfRange, scan, tx, PROGRAM)


# ══════════════════════════════════════════════════════════════
#  ORCHESTRATOR SCENARIOS
# ══════════════════════════════════════════════════════════════


def test_swap_scenario():
    tx = make_tx([(0, cpi_payload(make_swap()))])
    events = parse_events(PROGRAM, tx)
    assert len(events) == 1, f"expected one event, got {events}"
    swap = events[0]
    assert isinstance(swap, SwapEvent)
    assert swap.token_account_0 == ACCOUNT_A
    assert swap.token_account_1 == ACCOUNT_B
    assert swap.zero_for_one is True
    assert swap.amount_0 == 1000


def test_truncated_scenario():
    tx = make_tx([(0, cpi_payload(make_swap(), tagged=False)[:4])])
    assert parse_events(PROGRAM, tx) == []


def test_unrelated_transaction():
    tx = make_tx([(0, cpi_payload(make_swap()))],
                 account_keys=(TOKEN_PROGRAM, ACCOUNT_A, ACCOUNT_B))
    assert parse_events(PROGRAM, tx) == []


def test_empty_transaction():
    tx = TransactionMetadata(signature="sig")
    assert parse_events(PROGRAM, tx) == []


def test_program_index_out_of_range():
    tx = make_tx([(0, cpi_payload(make_swap())), (17, b"\x00" * 8)])
    e = expect_raises(IndexOutOfRange, parse_events, PROGRAM, tx)
    assert e.index == 17


def test_bad_candidate_does_not_affect_others():
    first = make_swap(amount_0=1)
    last = make_swap(amount_0=3)
    garbage = cpi_payload(make_swap())[:50]
    tx = make_tx([
        (0, cpi_payload(first)),
        (0, b"\x00\x01"),
        (0, garbage),
        (0, EVENT_IX_TAG + b"\xee" * 8),
        (0, cpi_payload(last)),
    ])
    events = parse_events(PROGRAM, tx)
    assert [e.amount_0 for e in events] == [1, 3]


def test_order_preserved_across_kinds():
    liquidity = sample_event(IncreaseLiquidityEvent, 4)
    swaps = [make_swap(amount_0=n) for n in (10, 20)]
    tx = make_tx([
        (0, cpi_payload(swaps[0])),
        (0, cpi_payload(liquidity)),
        (0, cpi_payload(swaps[1])),
    ])
    assert parse_events(PROGRAM, tx) == [swaps[0], liquidity, swaps[1]]


def test_idempotent():
    tx = make_tx([(0, cpi_payload(make_swap())), (0, b"junk")])
    assert parse_events(PROGRAM, tx) == parse_events(PROGRAM, tx)


def test_target_is_a_parameter():
    other = key(42)
    tx = make_tx([(0, cpi_payload(make_swap()))],
                 account_keys=(other, ACCOUNT_A, ACCOUNT_B))
    assert len(parse_events(other, tx)) == 1
    assert parse_events(PROGRAM, tx) == []


def test_keep_unknown():
    tx = make_tx([(0, EVENT_IX_TAG + b"\xee" * 8 + b"data")])
    assert parse_events(PROGRAM, tx) == []
    events = parse_events(PROGRAM, tx, keep_unknown=True)
    assert len(events) == 1 and isinstance(events[0], UnknownEvent)


def test_leading_swap():
    liquidity = sample_event(IncreaseLiquidityEvent, 4)
    swap = make_swap()
    assert leading_swap([swap, liquidity]) == swap
    assert leading_swap([liquidity, swap]) is None, "only the leading event counts"
    assert leading_swap([liquidity]) is None
    assert leading_swap([]) is None


# ══════════════════════════════════════════════════════════════
#  LOG FALLBACK
# ══════════════════════════════════════════════════════════════


def _data_line(event) -> str:
    return "Program data: " + base64.b64encode(event.encode()).decode()


def test_log_events_attributed_to_program():
    swap = make_swap()
    logs = [
        f"Program {PROGRAM} invoke [1]",
        "Program log: Instruction: Swap",
        f"Program {TOKEN_PROGRAM} invoke [2]",
        _data_line(make_swap(amount_0=666)),   # emitted by the token program
        f"Program {TOKEN_PROGRAM} success",
        _data_line(swap),
        "Program data: !!!not-base64!!!",
        f"Program {PROGRAM} success",
    ]
    tx = make_tx([], log_messages=logs)
    assert parse_log_events(PROGRAM, tx) == [swap]


def test_log_events_order_and_truncation():
    a, b = make_swap(amount_0=1), make_swap(amount_0=2)
    logs = [
        f"Program {PROGRAM} invoke [1]",
        _data_line(a),
        f"Program {PROGRAM} success",
        f"Program {PROGRAM} invoke [1]",
        _data_line(b),
        "Log truncated",
        _data_line(make_swap(amount_0=3)),
    ]
    tx = make_tx([], log_messages=logs)
    candidates = scan_logs(tx, PROGRAM)
    assert [c.source_order[0] for c in candidates] == [0, 1]
    assert parse_log_events(PROGRAM, tx) == [a, b]


def test_log_events_unrelated():
    tx = make_tx([], account_keys=(TOKEN_PROGRAM,),
                 log_messages=[f"Program {TOKEN_PROGRAM} invoke [1]"])
    assert parse_log_events(PROGRAM, tx) == []


# ══════════════════════════════════════════════════════════════
#  RUN ALL TESTS
# ══════════════════════════════════════════════════════════════

if __name__ == "__main__":
    passed = 0
    failed = 0

    def run_test(name, func):
        global passed, failed
        try:
            func()
            print(f"  PASS  {name}")
            passed += 1
        except Exception as e:
            print(f"  FAIL  {name}: {e}")
            failed += 1

    print("\n── Scanner Tests ──")
    run_test("resolve", test_resolve)
    run_test("scan_only_self_invocations", test_scan_only_self_invocations)
    run_test("scan_ignores_groups_from_other_outer_programs",
             test_scan_ignores_groups_from_other_outer_programs)
    run_test("scan_orders_groups_by_outer_index", test_scan_orders_groups_by_outer_index)
    run_test("scan_bad_outer_index", test_scan_bad_outer_index)
    run_test("scan_bad_account_index", test_scan_bad_account_index)

    print("\n── Orchestrator Tests ──")
    run_test("swap_scenario", test_swap_scenario)
    run_test("truncated_scenario", test_truncated_scenario)
    run_test("unrelated_transaction", test_unrelated_transaction)
    run_test("empty_transaction", test_empty_transaction)
    run_test("program_index_out_of_range", test_program_index_out_of_range)
    run_test("bad_candidate_does_not_affect_others", test_bad_candidate_does_not_affect_others)
    run_test("order_preserved_across_kinds", test_order_preserved_across_kinds)
    run_test("idempotent", test_idempotent)
    run_test("target_is_a_parameter", test_target_is_a_parameter)
    run_test("keep_unknown", test_keep_unknown)
    run_test("leading_swap", test_leading_swap)

    print("\n── Log Fallback Tests ──")
    run_test("log_events_attributed_to_program", test_log_events_attributed_to_program)
    run_test("log_events_order_and_truncation", test_log_events_order_and_truncation)
    run_test("log_events_unrelated", test_log_events_unrelated)

    print(f"\n{'='*50}")
    print(f"Results: {passed} passed, {failed} failed out of {passed + failed}")
    if failed:
        sys.exit(1)
    else:
        print("All tests passed!")
