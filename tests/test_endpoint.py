"""Tests for the endpoint module."""

from unittest.mock import AsyncMock, patch

import pytest

from steady_submit.config import Config
from steady_submit.endpoint import MockEndpoint, SubmitResult
from steady_submit.errors import ServiceUnavailableError


class TestSubmitResult:
    def test_id(self):
        result = SubmitResult(success=True, data={"id": "abc", "email": "a@example.com"})
        assert result.id == "abc"

    def test_missing_id(self):
        assert SubmitResult(success=True).id is None


class TestForcedOutcomes:
    @pytest.mark.asyncio
    async def test_always_fail_email(self):
        endpoint = MockEndpoint()
        for _ in range(3):
            with pytest.raises(ServiceUnavailableError) as exc_info:
                await endpoint.submit({"email": "error@example.com"})
            assert exc_info.value.status == 503
        assert endpoint.calls == 3

    @pytest.mark.asyncio
    async def test_flaky_email_recovers_on_third_call(self):
        endpoint = MockEndpoint()
        payload = {"email": "retry@example.com", "amount": 10}

        for _ in range(2):
            with pytest.raises(ServiceUnavailableError):
                await endpoint.submit(payload)
        result = await endpoint.submit(payload)

        assert result.success is True
        assert result.id.startswith("mock-recovered-")
        assert result.data["amount"] == 10

    @pytest.mark.asyncio
    async def test_flaky_counter_resets_after_recovery(self):
        endpoint = MockEndpoint(flaky_failures=1)
        payload = {"email": "retry@example.com"}

        with pytest.raises(ServiceUnavailableError):
            await endpoint.submit(payload)
        await endpoint.submit(payload)

        with pytest.raises(ServiceUnavailableError):
            await endpoint.submit(payload)

    @pytest.mark.asyncio
    async def test_flaky_state_is_per_instance(self):
        first = MockEndpoint()
        second = MockEndpoint()
        payload = {"email": "retry@example.com"}

        for _ in range(2):
            with pytest.raises(ServiceUnavailableError):
                await first.submit(payload)

        with pytest.raises(ServiceUnavailableError):
            await second.submit(payload)
        assert (await first.submit(payload)).success is True

    @pytest.mark.asyncio
    async def test_custom_emails(self):
        endpoint = MockEndpoint(always_fail_email="down@test", flaky_email="flaky@test")
        with pytest.raises(ServiceUnavailableError):
            await endpoint.submit({"email": "down@test"})


class TestRandomOutcomes:
    @pytest.mark.asyncio
    async def test_immediate_success(self):
        endpoint = MockEndpoint()
        with patch.object(endpoint.rng, "randint", side_effect=[0, 4242]):
            result = await endpoint.submit({"email": "a@example.com"})
        assert result.success is True
        assert result.id.startswith("mock-")
        assert result.id.endswith("-4242")
        assert result.data["email"] == "a@example.com"

    @pytest.mark.asyncio
    async def test_delayed_success(self):
        endpoint = MockEndpoint(latency_min=5.0, latency_max=10.0)
        with (
            patch.object(endpoint.rng, "randint", side_effect=[1, 1234]),
            patch.object(endpoint.rng, "uniform", return_value=7.5) as mock_uniform,
            patch(
                "steady_submit.endpoint.asyncio.sleep", new_callable=AsyncMock
            ) as mock_sleep,
        ):
            result = await endpoint.submit({"email": "a@example.com"})

        assert result.success is True
        mock_uniform.assert_called_once_with(5.0, 10.0)
        mock_sleep.assert_awaited_once_with(7.5)

    @pytest.mark.asyncio
    async def test_random_outage(self):
        endpoint = MockEndpoint()
        with patch.object(endpoint.rng, "randint", return_value=2):
            with pytest.raises(ServiceUnavailableError):
                await endpoint.submit({"email": "a@example.com"})

    @pytest.mark.asyncio
    async def test_seed_makes_outcomes_repeatable(self):
        async def outcomes(endpoint):
            seen = []
            for _ in range(10):
                try:
                    await endpoint.submit({"email": "a@example.com"})
                    seen.append("ok")
                except ServiceUnavailableError:
                    seen.append("503")
            return seen

        first = MockEndpoint(latency_min=0, latency_max=0, seed=7)
        second = MockEndpoint(latency_min=0, latency_max=0, seed=7)
        assert await outcomes(first) == await outcomes(second)


class TestIdempotency:
    @pytest.mark.asyncio
    async def test_replays_result_for_processed_key(self):
        endpoint = MockEndpoint()
        payload = {"email": "a@example.com", "idempotency_key": "txn_1"}

        with patch.object(endpoint.rng, "randint", side_effect=[0, 1111]):
            first = await endpoint.submit(payload)
        second = await endpoint.submit(payload)

        assert second is first
        assert endpoint.calls == 2
        assert endpoint.processed == {"txn_1": first}

    @pytest.mark.asyncio
    async def test_processed_keeps_every_key(self):
        endpoint = MockEndpoint()
        with patch.object(endpoint.rng, "randint", return_value=0):
            for i in range(5):
                await endpoint.submit(
                    {"email": "a@example.com", "idempotency_key": f"txn_{i}"}
                )
        assert sorted(endpoint.processed) == [f"txn_{i}" for i in range(5)]

    @pytest.mark.asyncio
    async def test_failed_attempts_are_not_recorded(self):
        endpoint = MockEndpoint()
        with pytest.raises(ServiceUnavailableError):
            await endpoint.submit(
                {"email": "error@example.com", "idempotency_key": "txn_2"}
            )
        assert endpoint.processed == {}

    @pytest.mark.asyncio
    async def test_call_delegates_to_submit(self):
        endpoint = MockEndpoint()
        with pytest.raises(ServiceUnavailableError):
            await endpoint({"email": "error@example.com"})
        assert endpoint.calls == 1


class TestFromConfig:
    def test_from_config(self):
        config = Config(
            latency_min=1.0,
            latency_max=2.0,
            always_fail_email="x@test",
            flaky_email="y@test",
            flaky_failures=4,
            seed=3,
        )
        endpoint = MockEndpoint.from_config(config)
        assert endpoint.latency_min == 1.0
        assert endpoint.latency_max == 2.0
        assert endpoint.always_fail_email == "x@test"
        assert endpoint.flaky_email == "y@test"
        assert endpoint.flaky_failures == 4
