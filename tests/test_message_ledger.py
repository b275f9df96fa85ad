import pytest
from sqlalchemy import func, select

from app.core.exceptions import BadRequestError, NotFoundError
from app.models.messaging import InactiveMessage
from app.services.MessageLedger import MessageLedger


async def test_post_creates_thread_and_message(db):
    ledger = MessageLedger(db)
    message = await ledger.post(["u1", "u2", "u4"], "u1", "hi")

    assert message.sender_username == "u1"
    assert message.body == "hi"
    assert await ledger.resolver.resolve(["u4", "u2", "u1"]) == message.thread_id


async def test_post_reuses_thread_for_same_party(db):
    ledger = MessageLedger(db)
    first = await ledger.post(["u1", "u2"], "u1", "hi")
    second = await ledger.post(["u2", "u1"], "u2", "hey")
    assert first.thread_id == second.thread_id
    assert second.id > first.id


async def test_post_rejects_sender_outside_party(db):
    with pytest.raises(BadRequestError):
        await MessageLedger(db).post(["u1", "u2"], "u4", "hi")


async def test_post_rejects_single_member_party(db):
    with pytest.raises(BadRequestError):
        await MessageLedger(db).post(["u1"], "u1", "hi")


async def test_post_missing_participant(db):
    with pytest.raises(NotFoundError) as exc:
        await MessageLedger(db).post(["u1", "nope"], "u1", "hi")
    assert "nope" in exc.value.message


async def test_reply_requires_membership(db):
    ledger = MessageLedger(db)
    message = await ledger.post(["u1", "u2"], "u1", "hi")

    reply = await ledger.reply(message.thread_id, "u2", "yo")
    assert reply.thread_id == message.thread_id

    with pytest.raises(NotFoundError) as exc:
        await ledger.reply(message.thread_id, "u4", "let me in")
    assert exc.value.message == f"No threadId: {message.thread_id} with user: u4"

    with pytest.raises(NotFoundError):
        await ledger.reply(message.thread_id, "nope", "hello")

    with pytest.raises(NotFoundError):
        await ledger.reply("no-such-thread", "u1", "hello")


async def test_list_for_viewer_orders_messages_and_lists_members(db):
    ledger = MessageLedger(db)
    first = await ledger.post(["u1", "u2"], "u1", "one")
    await ledger.reply(first.thread_id, "u2", "two")
    await ledger.reply(first.thread_id, "u1", "three")

    thread = await ledger.list_for_viewer(first.thread_id, "u2")
    assert [m.body for m in thread.messages] == ["one", "two", "three"]
    assert [m.username for m in thread.members] == ["u1", "u2"]
    assert thread.members[0].first_name == "u1F"


async def test_hidden_message_stays_visible_to_other_members(db):
    ledger = MessageLedger(db)
    first = await ledger.post(["u1", "u2", "u4"], "u1", "hi")
    thread_id = first.thread_id
    await ledger.reply(thread_id, "u2", "yo")

    assert await ledger.hide_message(first.id, "u1") == first.id

    for_u1 = await ledger.list_for_viewer(thread_id, "u1")
    for_u2 = await ledger.list_for_viewer(thread_id, "u2")
    assert [m.body for m in for_u1.messages] == ["yo"]
    assert [m.body for m in for_u2.messages] == ["hi", "yo"]


async def test_hide_message_twice_keeps_single_tombstone(db):
    ledger = MessageLedger(db)
    message = await ledger.post(["u1", "u2"], "u1", "hi")
    await ledger.hide_message(message.id, "u1")
    await ledger.hide_message(message.id, "u1")

    result = await db.execute(
        select(func.count(InactiveMessage.id)).where(InactiveMessage.message_id == message.id)
    )
    assert result.scalar_one() == 1


async def test_hide_message_errors(db):
    ledger = MessageLedger(db)
    message = await ledger.post(["u1", "u2"], "u1", "hi")

    with pytest.raises(NotFoundError) as exc:
        await ledger.hide_message(9999, "u1")
    assert exc.value.message == "No message: 9999"

    with pytest.raises(NotFoundError):
        await ledger.hide_message(message.id, "u4")


async def test_hide_thread_returns_only_newly_hidden_ids(db):
    ledger = MessageLedger(db)
    first = await ledger.post(["u1", "u2"], "u1", "one")
    second = await ledger.reply(first.thread_id, "u2", "two")
    third = await ledger.reply(first.thread_id, "u1", "three")

    await ledger.hide_message(second.id, "u1")
    hidden = await ledger.hide_thread(first.thread_id, "u1")
    assert hidden == [first.id, third.id]

    assert (await ledger.list_for_viewer(first.thread_id, "u1")).messages == []
    assert len((await ledger.list_for_viewer(first.thread_id, "u2")).messages) == 3
    assert await ledger.hide_thread(first.thread_id, "u1") == []


async def test_list_threads_for_user_orders_by_latest_visible_message(db):
    ledger = MessageLedger(db)
    pair = await ledger.post(["u1", "u2"], "u1", "pair one")
    trio = await ledger.post(["u1", "u2", "u4"], "u4", "trio one")
    pair_reply = await ledger.reply(pair.thread_id, "u2", "pair two")

    threads = await ledger.list_threads_for_user("u1")
    assert [t.thread_id for t in threads] == [pair.thread_id, trio.thread_id]
    assert threads[0].last_message.id == pair_reply.id
    assert [m.username for m in threads[1].members] == ["u1", "u2", "u4"]

    # hiding the latest pair message falls back to the earlier one
    await ledger.hide_message(pair_reply.id, "u1")
    threads = await ledger.list_threads_for_user("u1")
    assert [t.thread_id for t in threads] == [trio.thread_id, pair.thread_id]
    assert threads[1].last_message.id == pair.id

    # other members are unaffected
    threads = await ledger.list_threads_for_user("u2")
    assert threads[0].last_message.id == pair_reply.id


async def test_list_threads_skips_fully_hidden_and_empty_threads(db):
    ledger = MessageLedger(db)
    pair = await ledger.post(["u1", "u2"], "u1", "hi")
    await ledger.resolver.get_or_create(["u1", "u4"])

    await ledger.hide_thread(pair.thread_id, "u1")
    assert await ledger.list_threads_for_user("u1") == []


async def test_list_threads_for_missing_user(db):
    with pytest.raises(NotFoundError):
        await MessageLedger(db).list_threads_for_user("nope")


async def test_scenario_three_party_thread(db):
    ledger = MessageLedger(db)
    first = await ledger.post(["u1", "u2", "u4"], "u1", "hi")
    t1 = first.thread_id

    threads = await ledger.list_threads_for_user("u1")
    assert [t.thread_id for t in threads] == [t1]

    await ledger.reply(t1, "u2", "yo")
    await ledger.hide_message(first.id, "u1")

    assert first.id not in [m.id for m in (await ledger.list_for_viewer(t1, "u1")).messages]
    assert first.id in [m.id for m in (await ledger.list_for_viewer(t1, "u2")).messages]
