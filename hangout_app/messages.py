import threading
from collections import defaultdict
from datetime import datetime
from hangout_app import app, db
from hangout_app.models import Message
from hangout_app.repository import commit, execute, get_chat, chat_participants
from hangout_app.chats import is_expired, require_member
from hangout_app.errors import ConflictError, ValidationError

class MessageBus:
    """
    Delivers new messages to whoever has a chat open in this process.

    Callbacks run synchronously on the sending thread, after the
    message is committed. A subscriber that misses messages (e.g. while
    reconnecting) catches up with `messages_for(chat_id, since_id)`,
    which makes delivery at-least-once overall.
    """

    def __init__(self):
        self._subscribers = defaultdict(list)
        self._lock = threading.Lock()

    def subscribe(self, chat_id, on_message):
        token = object()
        with self._lock:
            self._subscribers[chat_id].append((token, on_message))

        def unsubscribe():
            with self._lock:
                subs = self._subscribers.get(chat_id, [])
                subs[:] = [(t, f) for t, f in subs if t is not token]
                if not subs:
                    self._subscribers.pop(chat_id, None)
        return unsubscribe

    def subscriber_count(self, chat_id):
        with self._lock:
            return len(self._subscribers.get(chat_id, []))

    def publish(self, message):
        with self._lock:
            subs = list(self._subscribers.get(message.chat_id, []))
        delivered = 0
        for _, on_message in subs:
            try:
                on_message(message)
                delivered += 1
            except Exception:
                # One broken viewer mustn't stop delivery to the rest.
                app.logger.exception('subscriber failed on message %s in chat %s', message.id, message.chat_id)
        return delivered

bus = MessageBus()

def subscribe_messages(chat_id, on_message):
    return bus.subscribe(chat_id, on_message)

def send_message(actor, chat_id, content, now=None):
    if now is None:
        now = datetime.utcnow()
    chat = get_chat(chat_id)
    require_member(chat_id, actor.id)
    if chat.purged_at is not None or is_expired(chat, chat_participants(chat_id), now):
        raise ConflictError(f'chat {chat_id} has expired')
    content = (content or '').strip()
    if not content:
        raise ValidationError('message is empty')
    if len(content) > app.config['MESSAGE_MAX_LENGTH']:
        raise ValidationError(f"message is longer than {app.config['MESSAGE_MAX_LENGTH']} characters")
    message = Message(chat_id=chat_id, user_id=actor.id, content=content, created_at=now)
    db.session.add(message)
    commit()
    bus.publish(message)
    return message

def messages_for(chat_id, since_id=None):
    get_chat(chat_id)
    q = db.select(Message).filter_by(chat_id=chat_id)
    if since_id is not None:
        q = q.filter(Message.id > since_id)
    q = q.order_by(Message.created_at, Message.id)
    return execute(q).scalars().all()
