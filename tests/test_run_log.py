from __future__ import annotations

import pytest

from semantic_architect.errors import ProcessCancelled
from semantic_architect.models.events import LogLevel
from semantic_architect.services.cancellation import CancellationToken, check_cancelled
from semantic_architect.services.run_log import RunLog


def test_entries_have_sequential_ids_and_levels():
    run_log = RunLog()
    run_log.info("a")
    run_log.success("b")
    run_log.warning("c")
    run_log.error("d")

    assert [e.level for e in run_log.entries] == [
        LogLevel.INFO,
        LogLevel.SUCCESS,
        LogLevel.WARNING,
        LogLevel.ERROR,
    ]
    assert [e.id.split("_")[1] for e in run_log.entries] == ["1", "2", "3", "4"]
    assert run_log.to_dicts()[1]["level"] == "SUCCESS"


def test_subscribers_receive_entries_and_failures_are_contained():
    received = []

    def broken(_entry):
        raise RuntimeError("listener bug")

    run_log = RunLog(on_log=broken)
    run_log.subscribe(received.append)
    entry = run_log.info("hello")

    assert received == [entry]
    assert run_log.entries == [entry]


def test_cancellation_token():
    token = CancellationToken()
    check_cancelled(token, "fetch")
    check_cancelled(None, "fetch")

    token.cancel()
    assert token.cancelled
    with pytest.raises(ProcessCancelled, match="during fetch"):
        check_cancelled(token, "fetch")
