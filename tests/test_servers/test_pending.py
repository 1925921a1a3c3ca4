"""
Tests for the server-side pending obligation table.
"""
from l402_agent.servers import PendingObligationTable


def test_record_and_get(clock):
    table = PendingObligationTable(clock=clock)
    obligation = table.record("ABCD", "lnbc10n1p", 1, expiry_seconds=600)

    assert obligation.created_at == clock.now
    assert obligation.expires_at == clock.now + 600
    assert table.get("abcd") == obligation
    assert "AbCd" in table
    assert len(table) == 1


def test_sweep_removes_only_expired(clock):
    table = PendingObligationTable(clock=clock)
    table.record("aa", "inv-a", 1, expiry_seconds=10)
    table.record("bb", "inv-b", 1, expiry_seconds=100)

    clock.advance(10)
    assert table.sweep() == 0  # expiry instant itself is still pending

    clock.advance(1)
    assert table.sweep() == 1
    assert "aa" not in table
    assert "bb" in table


def test_sweep_if_oversized_waits_for_threshold(clock):
    table = PendingObligationTable(sweep_threshold=3, clock=clock)
    for i in range(3):
        table.record(f"{i:02x}", f"inv-{i}", 1, expiry_seconds=1)
    clock.advance(5)

    assert table.sweep_if_oversized() == 0
    assert len(table) == 3

    table.record("ff", "inv-ff", 1, expiry_seconds=600)
    assert table.sweep_if_oversized() == 3
    assert len(table) == 1
