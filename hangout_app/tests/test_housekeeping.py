import pytest
from sqlalchemy.sql.expression import Delete
from hangout_app import db
from hangout_app.models import GroupChat, HangoutRequest, Message
from hangout_app.housekeeping import expired_chats, purge_expired_chats
from hangout_app.messages import send_message
from hangout_app.chats import set_keep_chat
from hangout_app.tasks import task_purge_expired_chats
from hangout_app.users import user_ref
from hangout_app.errors import ConflictError, StorageError
from hangout_app.tests.helpers import mkuser, mkhangout, accept_all, hrs, fail_statements

def mkchat(a, b, messages=2):
    h = mkhangout(a, [b])
    accept_all(h, [a, b])
    c = db.session.get(HangoutRequest, h.id).group_chat
    for i in range(messages):
        send_message(user_ref(a), c.id, f'message {i}')
    return c

def test_purge_expired_chats(testdb):
    a, b = mkuser(), mkuser()
    c = mkchat(a, b)
    later = c.expires_at + hrs(1)
    assert [x.id for x in expired_chats(later)] == [c.id]
    assert purge_expired_chats(now=later) == 1
    c = db.session.get(GroupChat, c.id)
    assert c.purged_at == later
    assert Message.query.filter_by(chat_id=c.id).count() == 0
    # the chat row and its members are still there
    assert sorted(p.user_id for p in c.participants) == sorted([a.id, b.id])
    assert db.session.get(HangoutRequest, c.hangout_id).group_chat_id == c.id

def test_purge_leaves_live_chats_alone(testdb):
    c = mkchat(mkuser(), mkuser())
    assert purge_expired_chats(now=c.expires_at - hrs(1)) == 0
    assert Message.query.filter_by(chat_id=c.id).count() == 2
    assert db.session.get(GroupChat, c.id).purged_at is None

def test_purge_leaves_kept_chats_alone(testdb):
    a = mkuser(is_pro=True)
    c = mkchat(a, mkuser())
    set_keep_chat(user_ref(a), c.id, a.id, True)
    assert purge_expired_chats(now=c.expires_at + hrs(100)) == 0
    assert Message.query.filter_by(chat_id=c.id).count() == 2

def test_purge_leaves_permanent_chats_alone(testdb):
    c = mkchat(mkuser(), mkuser())
    c.is_permanent = True
    db.session.commit()
    assert purge_expired_chats(now=c.expires_at + hrs(100)) == 0
    assert Message.query.filter_by(chat_id=c.id).count() == 2

def test_purge_only_expired_chats(testdb):
    c1 = mkchat(mkuser(), mkuser())
    c2 = mkchat(mkuser(), mkuser())
    c2.expires_at = c2.expires_at + hrs(48)
    db.session.commit()
    assert purge_expired_chats(now=c1.expires_at + hrs(1)) == 1
    assert Message.query.filter_by(chat_id=c1.id).count() == 0
    assert Message.query.filter_by(chat_id=c2.id).count() == 2

def test_purge_is_idempotent(testdb):
    c = mkchat(mkuser(), mkuser())
    later = c.expires_at + hrs(1)
    assert purge_expired_chats(now=later) == 1
    assert purge_expired_chats(now=later + hrs(1)) == 0
    assert db.session.get(GroupChat, c.id).purged_at == later

def test_purged_chat_rejects_messages(testdb):
    a, b = mkuser(is_pro=True), mkuser()
    c = mkchat(a, b)
    purge_expired_chats(now=c.expires_at + hrs(1))
    with pytest.raises(ConflictError):
        send_message(user_ref(a), c.id, 'too late')

def test_purge_task(testdb):
    c = mkchat(mkuser(), mkuser())
    # not expired yet as far as the task's clock is concerned
    assert task_purge_expired_chats() == 0
    c.expires_at = c.created_at - hrs(1)
    db.session.commit()
    assert task_purge_expired_chats() == 1
    assert Message.query.filter_by(chat_id=c.id).count() == 0

def test_failed_purge_changes_nothing(testdb, monkeypatch):
    c = mkchat(mkuser(), mkuser())
    fail_statements(monkeypatch, Delete)
    with pytest.raises(StorageError):
        purge_expired_chats(now=c.expires_at + hrs(1))
    monkeypatch.undo()
    db.session.commit()
    assert db.session.get(GroupChat, c.id).purged_at is None
    assert Message.query.filter_by(chat_id=c.id).count() == 2
