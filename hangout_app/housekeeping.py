from datetime import datetime
from hangout_app import app, db
from hangout_app.models import GroupChat, Message
from hangout_app.chats import is_expired
from hangout_app.repository import commit, execute

# Expired chats lose their messages. The chat and its members are
# kept, marked with `purged_at`, since the hangout still points at the
# chat.

def expired_chats(now):
    q = db.select(GroupChat) \
          .filter(GroupChat.purged_at.is_(None),
                  GroupChat.is_permanent.is_(False),
                  GroupChat.expires_at <= now)
    candidates = execute(q).scalars().all()
    # `keep_chat` is per member, so this last check is done here rather
    # than in sql.
    return [c for c in candidates if is_expired(c, c.participants, now)]

def purge_expired_chats(now=None):
    if now is None:
        now = datetime.utcnow()
    chats = expired_chats(now)
    for chat in chats:
        execute(db.delete(Message).where(Message.chat_id==chat.id))
        chat.purged_at = now
    commit()
    if chats:
        app.logger.info('purged %d expired chats: %s', len(chats), [c.id for c in chats])
    return len(chats)
