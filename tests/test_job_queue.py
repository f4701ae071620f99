"""
JobQueue tests against a mocked Redis client.
"""
import json
from unittest.mock import AsyncMock

import pytest

from cartographer.services.job_queue import Delivery, JobQueue, message_digest

QUEUE = 'queue:expedition'
BODY = json.dumps({'expeditionId': 'exp-1', 'campaignId': 'camp-1'})


@pytest.fixture
def queue():
    queue = JobQueue('redis://localhost:6379', max_deliveries=3)
    queue.redis = AsyncMock()
    return queue


def delivery(body=BODY):
    return Delivery(queue_name=QUEUE, body=body)


@pytest.mark.asyncio
async def test_enqueue_pushes_json(queue):
    await queue.enqueue(QUEUE, {'expeditionId': 'exp-1'})
    queue.redis.lpush.assert_awaited_once_with(QUEUE, '{"expeditionId": "exp-1"}')


@pytest.mark.asyncio
async def test_reserve_moves_to_processing(queue):
    queue.redis.blmove.return_value = BODY
    queue.redis.hget.return_value = "2"

    result = await queue.reserve(QUEUE, timeout=1)

    queue.redis.blmove.assert_awaited_once_with(
        QUEUE, 'queue:expedition:processing', 1, src='RIGHT', dest='LEFT'
    )
    assert result.body == BODY
    assert result.attempt == 3


@pytest.mark.asyncio
async def test_reserve_timeout(queue):
    queue.redis.blmove.return_value = None
    assert await queue.reserve(QUEUE) is None


@pytest.mark.asyncio
async def test_reserve_delivers_non_json_body(queue):
    queue.redis.blmove.return_value = "{garbage"
    queue.redis.hget.return_value = None

    result = await queue.reserve(QUEUE)

    assert result.body == "{garbage"
    assert result.attempt == 1


@pytest.mark.asyncio
async def test_ack_clears_processing_and_counter(queue):
    await queue.ack(delivery())

    queue.redis.lrem.assert_awaited_once_with('queue:expedition:processing', 1, BODY)
    queue.redis.hdel.assert_awaited_once_with('queue:expedition:deliveries', message_digest(BODY))


@pytest.mark.asyncio
async def test_reject_requeues_for_next_delivery(queue):
    queue.redis.hincrby.return_value = 1

    assert await queue.reject(delivery())

    queue.redis.rpush.assert_awaited_once_with(QUEUE, BODY)
    queue.redis.lpush.assert_not_awaited()


@pytest.mark.asyncio
async def test_reject_requeues_before_leaving_processing(queue):
    queue.redis.hincrby.return_value = 1
    calls = []
    queue.redis.rpush.side_effect = lambda *args: calls.append('rpush')
    queue.redis.lrem.side_effect = lambda *args: calls.append('lrem')

    await queue.reject(delivery())

    assert calls == ['rpush', 'lrem']


@pytest.mark.asyncio
async def test_reject_keeps_message_in_processing_when_requeue_fails(queue):
    queue.redis.hincrby.return_value = 1
    queue.redis.rpush.side_effect = ConnectionError("redis went away")

    with pytest.raises(ConnectionError):
        await queue.reject(delivery())

    # still in the processing list, so recover_unacked brings it back
    queue.redis.lrem.assert_not_awaited()


@pytest.mark.asyncio
async def test_reject_at_bound_dead_letters(queue):
    queue.redis.hincrby.return_value = 3

    assert not await queue.reject(delivery(), reason="campaign not found")

    queue.redis.rpush.assert_not_awaited()
    dead_list, payload = queue.redis.lpush.await_args.args
    assert dead_list == 'queue:expedition:dead'
    assert json.loads(payload)['body'] == BODY
    assert "campaign not found" in json.loads(payload)['reason']


@pytest.mark.asyncio
async def test_reject_without_requeue_dead_letters(queue):
    assert not await queue.reject(delivery("{garbage"), requeue=False, reason="decode")

    queue.redis.hincrby.assert_not_awaited()
    queue.redis.rpush.assert_not_awaited()
    assert queue.redis.lpush.await_args.args[0] == 'queue:expedition:dead'


@pytest.mark.asyncio
async def test_unbounded_redelivery(queue):
    queue.max_deliveries = 0
    queue.redis.hincrby.return_value = 1000

    assert await queue.reject(delivery())
    queue.redis.rpush.assert_awaited_once()


@pytest.mark.asyncio
async def test_recover_unacked(queue):
    queue.redis.lmove.side_effect = [BODY, "other", None]

    assert await queue.recover_unacked(QUEUE) == 2
    queue.redis.lmove.assert_awaited_with(
        'queue:expedition:processing', QUEUE, src='LEFT', dest='RIGHT'
    )
