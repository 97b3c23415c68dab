from datetime import datetime, timedelta
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from hangout_app import app, db
from hangout_app.models import GroupChat, ChatParticipant, Status
from hangout_app.users import require_self
from hangout_app.repository import commit, execute, get_chat, chat_participants, find_chat_participant, claim_group_chat
from hangout_app.errors import AuthorizationError, ConflictError, NotFoundError, StorageError

# Group chats
# -----------
#
# A chat is provisioned once per hangout, when every participant has
# accepted. It expires `CHAT_LIFETIME` after creation unless it is
# permanent, or at least one member has opted to keep it. Only pro
# users may keep a chat. Note that keeping a chat does *not* set
# `is_permanent`, so anything asking whether a chat is alive must look
# at the members as well as the chat.

class AlreadyProvisioned(ConflictError):
    pass

def provision_chat(hangout, participants, now=None):
    """
    Create the chat for `hangout`, enroll `participants` and attach the
    chat to the hangout, marking it accepted. Nothing is committed, so
    the caller applies this together with the status change that
    triggered it, or not at all.

    Raises `AlreadyProvisioned` (after rolling back) if another
    transaction got there first.
    """
    if now is None:
        now = datetime.utcnow()
    chat = GroupChat(hangout_id=hangout.id,
                     expires_at=now + app.config['CHAT_LIFETIME'],
                     is_permanent=False,
                     created_at=now)
    db.session.add(chat)
    # Any failure from here on rolls back, so the flushed chat and its
    # members never outlive the transaction that failed to claim them.
    try:
        db.session.flush()
        for user_id in sorted({p.user_id for p in participants}):
            db.session.add(ChatParticipant(chat_id=chat.id, user_id=user_id, keep_chat=False, joined_at=now))
        claimed = claim_group_chat(hangout.id, chat.id, Status.ACCEPTED)
    except IntegrityError as e:
        db.session.rollback()
        raise AlreadyProvisioned(f'hangout {hangout.id} already has a chat') from e
    except SQLAlchemyError as e:
        db.session.rollback()
        raise StorageError(f'database error: {type(e).__name__}') from e
    if not claimed:
        db.session.rollback()
        raise AlreadyProvisioned(f'hangout {hangout.id} already has a chat')
    app.logger.info('provisioned chat %s for hangout %s, expires at %s', chat.id, hangout.id, chat.expires_at)
    return chat

def is_expired(chat, participants, now):
    return (not chat.is_permanent and
            not any(p.keep_chat for p in participants) and
            now >= chat.expires_at)

def is_alive(chat, participants, now):
    return not is_expired(chat, participants, now)

def is_effectively_permanent(chat, participants):
    return chat.is_permanent or any(p.keep_chat for p in participants)

def time_remaining(chat, participants, now):
    # None means the chat never expires.
    if is_effectively_permanent(chat, participants):
        return None
    return max(timedelta(), chat.expires_at - now)

def set_keep_chat(actor, chat_id, user_id, keep, now=None):
    require_self(actor, user_id)
    if now is None:
        now = datetime.utcnow()
    chat = get_chat(chat_id)
    member = find_chat_participant(chat_id, user_id)
    if member is None:
        raise NotFoundError(f'user {user_id} is not a member of chat {chat_id}')
    if keep and not actor.is_pro:
        raise AuthorizationError('only pro users can keep chats')
    if keep and is_expired(chat, chat_participants(chat_id), now):
        raise ConflictError(f'chat {chat_id} has already expired')
    member.keep_chat = bool(keep)
    commit()
    app.logger.info('user %s set keep_chat=%s on chat %s', user_id, member.keep_chat, chat_id)

def chats_for(user_id):
    q = db.select(GroupChat) \
          .join(ChatParticipant, ChatParticipant.chat_id==GroupChat.id) \
          .filter(ChatParticipant.user_id==user_id) \
          .order_by(GroupChat.created_at.desc(), GroupChat.id.desc())
    return execute(q).scalars().all()

def require_member(chat_id, user_id):
    member = find_chat_participant(chat_id, user_id)
    if member is None:
        raise AuthorizationError(f'user {user_id} is not a member of chat {chat_id}')
    return member
