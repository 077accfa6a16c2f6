"""Tests for logging context variables."""

import asyncio

import pytest

from fairos_core.logging.context import (
    clear_log_context,
    get_log_context,
    log_context,
    set_log_context,
)


class TestLogContext:

    def test_defaults_are_empty(self):
        clear_log_context()
        assert get_log_context() == {"username": "", "pod": "", "operation": "", "trace_id": ""}

    def test_set_only_given_fields(self):
        clear_log_context()
        set_log_context(username="alice")
        set_log_context(pod="photos")

        ctx = get_log_context()
        assert ctx["username"] == "alice"
        assert ctx["pod"] == "photos"
        assert ctx["operation"] == ""

    def test_clear(self):
        set_log_context(username="alice", operation="upload", trace_id="t1")
        clear_log_context()

        assert all(value == "" for value in get_log_context().values())

    @pytest.mark.asyncio
    async def test_isolated_between_tasks(self):
        clear_log_context()

        async def worker(name):
            set_log_context(username=name)
            await asyncio.sleep(0)
            return get_log_context()["username"]

        results = await asyncio.gather(worker("alice"), worker("bob"))

        assert results == ["alice", "bob"]
        assert get_log_context()["username"] == ""


class TestScopedLogContext:

    def test_values_restored_on_exit(self):
        clear_log_context()
        set_log_context(username="outer")

        with log_context(username="alice", pod="photos"):
            assert get_log_context()["username"] == "alice"
            assert get_log_context()["pod"] == "photos"

        assert get_log_context()["username"] == "outer"
        assert get_log_context()["pod"] == ""

    def test_none_keeps_current_value(self):
        clear_log_context()
        set_log_context(pod="photos")

        with log_context(username="alice"):
            assert get_log_context()["pod"] == "photos"

        assert get_log_context() == {"username": "", "pod": "photos", "operation": "", "trace_id": ""}

    def test_restored_when_block_raises(self):
        clear_log_context()

        with pytest.raises(RuntimeError):
            with log_context(username="alice"):
                raise RuntimeError("boom")

        assert get_log_context()["username"] == ""
