from sqlalchemy import or_
from hangout_app import app, db
from hangout_app.models import HangoutRequest, HangoutParticipant, Status
from hangout_app.windows import Window
from hangout_app.users import require_self, require_users_exist, get_user
from hangout_app.repository import commit, flush, execute, get_hangout, fresh_participants, find_participant
from hangout_app.chats import provision_chat, AlreadyProvisioned
from hangout_app.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError


# Hangout states

# PENDING
#   initial state of the request and of every participant.
#   participants may be added / removed only in this state.

# ACCEPTED (terminal)
#   every participant has accepted. reached only through participant
#   responses, never set directly. group_chat_id is set in the same
#   transaction, and only in this state. re-accepting is a no-op, any
#   other response is a conflict.

# DECLINED (terminal)
#   some participant declined, or the creator cancelled.

# RESCHEDULED (terminal)
#   some participant (and no one declined), or the creator, asked for
#   another time. a replacement request is up to the caller; nothing
#   here creates one.

# A participant's status uses the same four values and is their own
# response only. The request status is an aggregate of those:
#
#   any DECLINED     => DECLINED
#   any RESCHEDULED  => RESCHEDULED
#   all ACCEPTED     => ACCEPTED
#   otherwise        => PENDING

def aggregate_status(participants):
    statuses = [p.status for p in participants]
    if Status.DECLINED in statuses:
        return Status.DECLINED
    if Status.RESCHEDULED in statuses:
        return Status.RESCHEDULED
    if statuses and all(s == Status.ACCEPTED for s in statuses):
        return Status.ACCEPTED
    return Status.PENDING

def as_status(status):
    if isinstance(status, Status):
        return status
    if isinstance(status, str):
        try:
            return Status.from_name(status)
        except KeyError:
            pass
    elif isinstance(status, int) and not isinstance(status, bool) and status in iter(Status):
        return Status(status)
    raise ValidationError(f'unknown status {status!r}')

def create_hangout(actor, window, creator_id, participant_ids):
    require_self(actor, creator_id)
    if not isinstance(window, Window) or not window.is_valid():
        raise ValidationError(f'invalid window: {window!r}')
    # The creator always gets a participant row, so that "everyone
    # accepted" includes them.
    user_ids = set(participant_ids) | {creator_id}
    if len(user_ids) < 2:
        raise ValidationError('a hangout needs at least one participant besides the creator')
    require_users_exist(user_ids)
    hangout = HangoutRequest(creator_id=creator_id,
                             day_of_week=window.day_of_week,
                             start_time=window.start_time,
                             end_time=window.end_time,
                             status=Status.PENDING)
    for user_id in sorted(user_ids):
        hangout.participants.append(HangoutParticipant(user_id=user_id, status=Status.PENDING))
    db.session.add(hangout)
    commit()
    app.logger.info('user %s created hangout %s with participants %s', creator_id, hangout.id, sorted(user_ids))
    return hangout

def _lock_hangout(hangout_id):
    # Serializes responses to the same hangout. (SQLite ignores FOR
    # UPDATE, where the unique chat constraint still applies.)
    q = db.select(HangoutRequest) \
          .filter_by(id=hangout_id) \
          .with_for_update() \
          .execution_options(populate_existing=True)
    hangout = execute(q).scalar_one_or_none()
    if hangout is None:
        raise NotFoundError(f'unknown hangout {hangout_id}')
    return hangout

def _reevaluate(hangout):
    participants = fresh_participants(hangout.id)
    status = aggregate_status(participants)
    if status == Status.ACCEPTED:
        provision_chat(hangout, participants)
        app.logger.info('hangout %s accepted by all %d participants', hangout.id, len(participants))
    elif status != hangout.status:
        hangout.status = status
        app.logger.info('hangout %s is now %s', hangout.id, status.label)

def _respond(hangout_id, user_id, status):
    hangout = _lock_hangout(hangout_id)
    participant = find_participant(hangout_id, user_id)
    if participant is None:
        raise NotFoundError(f'user {user_id} is not a participant of hangout {hangout_id}')
    if hangout.is_accepted():
        if status == Status.ACCEPTED and participant.status == Status.ACCEPTED:
            return
        raise ConflictError(f'hangout {hangout_id} has already been accepted')
    if hangout.is_terminal():
        raise ConflictError(f'hangout {hangout_id} is {hangout.status_name}')
    participant.status = status
    flush()
    _reevaluate(hangout)
    commit()

def update_participant_status(actor, hangout_id, user_id, status):
    require_self(actor, user_id)
    status = as_status(status)
    try:
        _respond(hangout_id, user_id, status)
    except AlreadyProvisioned:
        # Someone else's response completed the hangout first. Our
        # transaction was rolled back, so re-apply against the new
        # state, where accepting again is a no-op.
        app.logger.info('lost chat provisioning race on hangout %s, retrying', hangout_id)
        _respond(hangout_id, user_id, status)

def set_hangout_status(actor, hangout_id, status):
    status = as_status(status)
    hangout = _lock_hangout(hangout_id)
    if actor.id != hangout.creator_id:
        raise AuthorizationError('only the creator can change the status of a hangout')
    if status == Status.ACCEPTED:
        raise ValidationError('a hangout is accepted only when every participant accepts')
    if status == hangout.status:
        return
    if not hangout.is_pending():
        raise ConflictError(f'hangout {hangout_id} is {hangout.status_name}')
    hangout.status = status
    commit()
    app.logger.info('creator %s set hangout %s to %s', actor.id, hangout_id, status.label)

def _require_pending(hangout):
    if not hangout.is_pending():
        raise ConflictError(f'participants can only change while hangout {hangout.id} is pending')

def add_participant(actor, hangout_id, user_id):
    hangout = _lock_hangout(hangout_id)
    if actor.id != hangout.creator_id:
        raise AuthorizationError('only the creator can add participants')
    _require_pending(hangout)
    get_user(user_id)
    if find_participant(hangout_id, user_id) is not None:
        raise ConflictError(f'user {user_id} is already a participant of hangout {hangout_id}')
    # No re-evaluation: a new pending participant can't complete the
    # hangout.
    db.session.add(HangoutParticipant(hangout_id=hangout_id, user_id=user_id, status=Status.PENDING))
    commit()

def remove_participant(actor, hangout_id, user_id):
    hangout = _lock_hangout(hangout_id)
    if actor.id not in (hangout.creator_id, user_id):
        raise AuthorizationError('only the creator can remove other participants')
    _require_pending(hangout)
    participant = find_participant(hangout_id, user_id)
    if participant is None:
        raise NotFoundError(f'user {user_id} is not a participant of hangout {hangout_id}')
    if user_id == hangout.creator_id:
        raise ValidationError('the creator cannot be removed from their hangout')
    if len(fresh_participants(hangout_id)) <= 2:
        raise ValidationError('a hangout needs at least one participant besides the creator')
    hangout.participants.remove(participant)
    flush()
    # The participant removed may have been the only one yet to accept.
    _reevaluate(hangout)
    commit()

def hangouts_for(user_id):
    q = db.select(HangoutRequest) \
          .outerjoin(HangoutParticipant, HangoutParticipant.hangout_id==HangoutRequest.id) \
          .filter(or_(HangoutRequest.creator_id==user_id,
                      HangoutParticipant.user_id==user_id)) \
          .distinct() \
          .order_by(HangoutRequest.created_at.desc(), HangoutRequest.id.desc())
    return execute(q).scalars().all()

def participants_of(hangout_id):
    get_hangout(hangout_id)
    return fresh_participants(hangout_id)
