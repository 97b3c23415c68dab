from uuid import uuid4
from datetime import timedelta
from flask import g
from sqlalchemy.exc import OperationalError
from hangout_app import db
from hangout_app.models import User, AvailabilityWindow, Status
from hangout_app.windows import Window, parse_time
from hangout_app.users import user_ref
from hangout_app.hangouts import create_hangout, update_participant_status

def mins(m):
    return timedelta(minutes=m)

def hrs(h):
    return timedelta(hours=h)

def days(d):
    return timedelta(days=d)

def t(s):
    return parse_time(s)

def mkuser(username=None, is_pro=False):
    if username is None:
        username = f'user_{uuid4().hex[0:8]}'
    u = User(username=username, full_name=username.capitalize(), is_pro=is_pro)
    db.session.add(u)
    db.session.commit()
    return u

def mkwindow(user, day_of_week, start_time, end_time):
    w = AvailabilityWindow(user_id=user.id,
                           day_of_week=day_of_week,
                           start_time=t(start_time),
                           end_time=t(end_time))
    db.session.add(w)
    db.session.commit()
    return w

def window(day_of_week=1, start_time='10:00', end_time='11:00'):
    return Window(day_of_week, t(start_time), t(end_time))

def mkhangout(creator, others, **kwargs):
    return create_hangout(user_ref(creator), window(**kwargs), creator.id, [u.id for u in others])

def respond(user, hangout, status):
    update_participant_status(user_ref(user), hangout.id, user.id, status)

def accept_all(hangout, users):
    for u in users:
        respond(u, hangout, Status.ACCEPTED)

def setpro(user, is_pro=True):
    user.is_pro = is_pro
    db.session.commit()

# Requests made with the test client share the app context pushed by
# `testdb`, and with it flask-login's cached user. That's dropped here,
# so that the next request loads the user from the session.
def login(client, user):
    g.pop('_login_user', None)
    with client.session_transaction() as sess:
        sess['_user_id'] = str(user.id)
        sess['_fresh'] = True

def logout(client):
    g.pop('_login_user', None)
    with client.session_transaction() as sess:
        sess.clear()

def fail_statements(monkeypatch, stmt_type):
    # Makes every statement of `stmt_type` (e.g. `Update`) run through
    # the session fail as if the database had gone away.
    execute = db.session.execute
    def failing_execute(stmt, *args, **kwargs):
        if isinstance(stmt, stmt_type):
            raise OperationalError(stmt_type.__name__.upper(), {}, Exception('disk I/O error'))
        return execute(stmt, *args, **kwargs)
    monkeypatch.setattr(db.session, 'execute', failing_execute)
