from collections import namedtuple
from hangout_app import db
from hangout_app.models import User
from hangout_app.repository import execute, storage
from hangout_app.errors import AuthorizationError, NotFoundError

# The only things the core needs to know about a user. Passed into
# each operation as the acting user, rather than being looked up from
# a session.
UserRef = namedtuple('UserRef', ['id', 'is_pro'])

def user_ref(user):
    return UserRef(user.id, bool(user.is_pro))

def get_user(user_id):
    with storage():
        user = db.session.get(User, user_id)
    if user is None:
        raise NotFoundError(f'unknown user {user_id}')
    return user

def get_user_ref(user_id):
    return user_ref(get_user(user_id))

def find_user_by_username(username):
    q = db.select(User).filter(User.username==username)
    return execute(q).scalar_one_or_none()

def require_users_exist(user_ids):
    found = set(execute(db.select(User.id).filter(User.id.in_(user_ids))).scalars())
    missing = sorted(set(user_ids) - found)
    if missing:
        raise NotFoundError(f'unknown user(s) {missing}')

def require_self(actor, user_id):
    if actor.id != user_id:
        raise AuthorizationError(f'user {actor.id} cannot act on behalf of user {user_id}')
