from contextlib import contextmanager
from sqlalchemy.exc import SQLAlchemyError
from hangout_app import db
from hangout_app.models import AvailabilityWindow, HangoutRequest, HangoutParticipant, GroupChat, ChatParticipant
from hangout_app.errors import NotFoundError, StorageError

# Reads and writes for the five record types the core works with.
# Nothing here caches; every call goes to the database. Any database
# failure rolls back the whole transaction and surfaces as
# `StorageError`, so a half-applied change never reaches a later commit.

@contextmanager
def storage():
    try:
        yield
    except SQLAlchemyError as e:
        db.session.rollback()
        raise StorageError(f'database error: {type(e).__name__}') from e

def execute(stmt):
    with storage():
        return db.session.execute(stmt)

def commit():
    with storage():
        db.session.commit()

def flush():
    with storage():
        db.session.flush()

def _get(model, id, what):
    with storage():
        obj = db.session.get(model, id)
    if obj is None:
        raise NotFoundError(f'unknown {what} {id}')
    return obj

def get_window(window_id):
    return _get(AvailabilityWindow, window_id, 'window')

def get_hangout(hangout_id):
    return _get(HangoutRequest, hangout_id, 'hangout')

def get_chat(chat_id):
    return _get(GroupChat, chat_id, 'chat')

def windows_for(user_id):
    q = db.select(AvailabilityWindow) \
          .filter_by(user_id=user_id) \
          .order_by(AvailabilityWindow.day_of_week, AvailabilityWindow.start_time, AvailabilityWindow.id)
    return execute(q).scalars().all()

def fresh_participants(hangout_id):
    # `populate_existing` overwrites whatever the session already holds,
    # so concurrent responses committed by others are seen.
    q = db.select(HangoutParticipant) \
          .filter_by(hangout_id=hangout_id) \
          .order_by(HangoutParticipant.id) \
          .execution_options(populate_existing=True)
    return execute(q).scalars().all()

def find_participant(hangout_id, user_id):
    q = db.select(HangoutParticipant).filter_by(hangout_id=hangout_id, user_id=user_id)
    return execute(q).scalar_one_or_none()

def chat_for_hangout(hangout_id):
    q = db.select(GroupChat).filter_by(hangout_id=hangout_id)
    return execute(q).scalar_one_or_none()

def chat_participants(chat_id):
    q = db.select(ChatParticipant) \
          .filter_by(chat_id=chat_id) \
          .order_by(ChatParticipant.id) \
          .execution_options(populate_existing=True)
    return execute(q).scalars().all()

def find_chat_participant(chat_id, user_id):
    q = db.select(ChatParticipant).filter_by(chat_id=chat_id, user_id=user_id)
    return execute(q).scalar_one_or_none()

def claim_group_chat(hangout_id, chat_id, status):
    # Compare-and-set: only the first writer gets to attach a chat.
    stmt = db.update(HangoutRequest) \
             .where(HangoutRequest.id==hangout_id,
                    HangoutRequest.group_chat_id.is_(None)) \
             .values(group_chat_id=chat_id, status=status)
    return execute(stmt).rowcount == 1
