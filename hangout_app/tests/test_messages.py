import pytest
from hangout_app import app, db
from hangout_app.models import HangoutRequest, Message
from hangout_app.messages import MessageBus, send_message, messages_for, subscribe_messages, bus
from hangout_app.users import user_ref
from hangout_app.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from hangout_app.tests.helpers import mkuser, mkhangout, accept_all, hrs, mins

@pytest.fixture(scope='function')
def accepted(testdb):
    a = mkuser()
    b = mkuser()
    h = mkhangout(a, [b])
    accept_all(h, [a, b])
    h = db.session.get(HangoutRequest, h.id)
    return h.group_chat, a, b

def test_send_message(accepted):
    c, a, b = accepted
    m = send_message(user_ref(a), c.id, '  see you there  ')
    assert Message.query.count() == 1
    assert m.chat_id == c.id
    assert m.user_id == a.id
    assert m.content == 'see you there'

def test_messages_ordered_by_creation(accepted):
    c, a, b = accepted
    now = c.created_at
    send_message(user_ref(a), c.id, 'second', now=now + mins(2))
    send_message(user_ref(b), c.id, 'first', now=now + mins(1))
    send_message(user_ref(b), c.id, 'third', now=now + mins(3))
    assert [m.content for m in messages_for(c.id)] == ['first', 'second', 'third']

def test_messages_since(accepted):
    c, a, b = accepted
    m1 = send_message(user_ref(a), c.id, 'one')
    m2 = send_message(user_ref(b), c.id, 'two')
    assert [m.id for m in messages_for(c.id, since_id=m1.id)] == [m2.id]
    assert messages_for(c.id, since_id=m2.id) == []

def test_messages_for__unknown_chat(testdb):
    with pytest.raises(NotFoundError):
        messages_for(999)

def test_send_message__not_a_member(accepted):
    c, a, b = accepted
    with pytest.raises(AuthorizationError):
        send_message(user_ref(mkuser()), c.id, 'hi')
    assert Message.query.count() == 0

def test_send_message__unknown_chat(accepted):
    c, a, b = accepted
    with pytest.raises(NotFoundError):
        send_message(user_ref(a), 999, 'hi')

@pytest.mark.parametrize('content', ['', '   ', None])
def test_send_message__empty(accepted, content):
    c, a, b = accepted
    with pytest.raises(ValidationError):
        send_message(user_ref(a), c.id, content)

def test_send_message__too_long(accepted):
    c, a, b = accepted
    with pytest.raises(ValidationError):
        send_message(user_ref(a), c.id, 'x' * (app.config['MESSAGE_MAX_LENGTH'] + 1))
    send_message(user_ref(a), c.id, 'x' * app.config['MESSAGE_MAX_LENGTH'])

def test_send_message__expired_chat(accepted):
    c, a, b = accepted
    with pytest.raises(ConflictError):
        send_message(user_ref(a), c.id, 'anyone?', now=c.expires_at + hrs(1))
    assert Message.query.count() == 0

def test_subscribers_receive_new_messages(accepted):
    c, a, b = accepted
    received = []
    unsubscribe = subscribe_messages(c.id, lambda m: received.append((m.chat_id, m.content)))
    try:
        send_message(user_ref(a), c.id, 'hello')
        send_message(user_ref(b), c.id, 'hi!')
    finally:
        unsubscribe()
    assert received == [(c.id, 'hello'), (c.id, 'hi!')]
    send_message(user_ref(a), c.id, 'unheard')
    assert len(received) == 2
    assert bus.subscriber_count(c.id) == 0

def test_subscription_is_per_chat(testdb):
    a, b, x, y = mkuser(), mkuser(), mkuser(), mkuser()
    h1 = mkhangout(a, [b])
    h2 = mkhangout(x, [y])
    accept_all(h1, [a, b])
    accept_all(h2, [x, y])
    c1 = db.session.get(HangoutRequest, h1.id).group_chat_id
    c2 = db.session.get(HangoutRequest, h2.id).group_chat_id
    received = []
    unsubscribe = subscribe_messages(c1, lambda m: received.append(m.content))
    try:
        send_message(user_ref(x), c2, 'elsewhere')
        send_message(user_ref(a), c1, 'here')
    finally:
        unsubscribe()
    assert received == ['here']

class FakeMessage:
    def __init__(self, id, chat_id):
        self.id = id
        self.chat_id = chat_id

def test_bus__failing_subscriber_does_not_block_others():
    mbus = MessageBus()
    received = []
    def broken(m):
        raise RuntimeError('viewer went away')
    mbus.subscribe(1, broken)
    mbus.subscribe(1, received.append)
    m = FakeMessage(10, 1)
    assert mbus.publish(m) == 1
    assert received == [m]

def test_bus__unsubscribe_twice():
    mbus = MessageBus()
    received = []
    unsubscribe = mbus.subscribe(1, received.append)
    other = mbus.subscribe(1, received.append)
    unsubscribe()
    unsubscribe()
    assert mbus.subscriber_count(1) == 1
    other()
    assert mbus.subscriber_count(1) == 0
    assert mbus.publish(FakeMessage(1, 1)) == 0
    assert received == []
