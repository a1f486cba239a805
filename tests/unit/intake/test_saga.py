"""Tests for the compensating saga runner."""

import pytest

from storefront.modules.intake.saga import Saga, SagaFailedError, SagaStep


class Journal:
    """Records the order in which saga callbacks run."""

    def __init__(self) -> None:
        self.entries: list[str] = []

    def action(self, name: str, result=None, fail: bool = False):
        async def run(results):
            self.entries.append(f"do:{name}")
            if fail:
                raise RuntimeError(f"{name} failed")
            return result if result is not None else name

        return run

    def compensate(self, name: str, fail: bool = False):
        async def run(results):
            self.entries.append(f"undo:{name}")
            if fail:
                raise RuntimeError(f"undo {name} failed")

        return run

    def recover(self, name: str, fail: bool = False):
        async def run(results, cause):
            self.entries.append(f"recover:{name}:{cause}")
            if fail:
                raise RuntimeError(f"recover {name} failed")

        return run


@pytest.fixture
def journal() -> Journal:
    return Journal()


class TestSaga:
    """Tests for Saga.execute."""

    @pytest.mark.asyncio
    async def test_all_steps_succeed(self, journal):
        saga = Saga(
            "test",
            [
                SagaStep("a", journal.action("a", result=1), compensate=journal.compensate("a")),
                SagaStep("b", journal.action("b", result=2)),
            ],
        )

        results = await saga.execute()

        assert results == {"a": 1, "b": 2}
        assert journal.entries == ["do:a", "do:b"]

    @pytest.mark.asyncio
    async def test_later_steps_see_earlier_results(self):
        async def first(results):
            return 20

        async def second(results):
            return results["first"] + 1

        results = await Saga("t", [SagaStep("first", first), SagaStep("second", second)]).execute()
        assert results["second"] == 21

    @pytest.mark.asyncio
    async def test_failure_compensates_in_reverse(self, journal):
        """Test completed steps are undone newest first."""
        saga = Saga(
            "test",
            [
                SagaStep("a", journal.action("a"), compensate=journal.compensate("a")),
                SagaStep("b", journal.action("b"), compensate=journal.compensate("b")),
                SagaStep("c", journal.action("c", fail=True), compensate=journal.compensate("c")),
            ],
        )

        with pytest.raises(SagaFailedError) as exc_info:
            await saga.execute()

        assert exc_info.value.step == "c"
        assert isinstance(exc_info.value.cause, RuntimeError)
        assert journal.entries == ["do:a", "do:b", "do:c", "undo:b", "undo:a"]

    @pytest.mark.asyncio
    async def test_compensation_failure_keeps_original_error(self, journal):
        """Test a failing rollback is logged and the step error still surfaces."""
        saga = Saga(
            "test",
            [
                SagaStep("a", journal.action("a"), compensate=journal.compensate("a", fail=True)),
                SagaStep("b", journal.action("b", fail=True)),
            ],
        )

        with pytest.raises(SagaFailedError) as exc_info:
            await saga.execute()

        assert exc_info.value.step == "b"
        assert str(exc_info.value.cause) == "b failed"
        assert journal.entries == ["do:a", "do:b", "undo:a"]

    @pytest.mark.asyncio
    async def test_failure_after_pivot_recovers_instead(self, journal):
        """Test writes before a succeeded pivot are never compensated."""
        saga = Saga(
            "test",
            [
                SagaStep("a", journal.action("a"), compensate=journal.compensate("a")),
                SagaStep("b", journal.action("b"), pivot=True),
                SagaStep("c", journal.action("c", fail=True), recover=journal.recover("c")),
            ],
        )

        with pytest.raises(SagaFailedError):
            await saga.execute()

        assert journal.entries == ["do:a", "do:b", "do:c", "recover:c:c failed"]

    @pytest.mark.asyncio
    async def test_failing_pivot_still_compensates(self, journal):
        saga = Saga(
            "test",
            [
                SagaStep("a", journal.action("a"), compensate=journal.compensate("a")),
                SagaStep("b", journal.action("b", fail=True), pivot=True),
            ],
        )

        with pytest.raises(SagaFailedError):
            await saga.execute()

        assert journal.entries == ["do:a", "do:b", "undo:a"]

    @pytest.mark.asyncio
    async def test_recovery_failure_keeps_original_error(self, journal):
        saga = Saga(
            "test",
            [
                SagaStep("a", journal.action("a"), pivot=True),
                SagaStep(
                    "b",
                    journal.action("b", fail=True),
                    recover=journal.recover("b", fail=True),
                ),
            ],
        )

        with pytest.raises(SagaFailedError) as exc_info:
            await saga.execute()

        assert exc_info.value.step == "b"
        assert str(exc_info.value.cause) == "b failed"
