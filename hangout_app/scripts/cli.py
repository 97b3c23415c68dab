#!/usr/bin/env python3

import argparse
from datetime import datetime
from pprint import pprint
from dateutil.parser import isoparse
from hangout_app import app, db
from hangout_app.models import ErrorLog
from hangout_app.tasks import task_purge_expired_chats
from hangout_app.housekeeping import purge_expired_chats
from hangout_app.availability import find_overlaps
from hangout_app.hangouts import participants_of
from hangout_app.repository import get_hangout, chat_participants
from hangout_app.chats import is_alive, time_remaining
from hangout_app.users import find_user_by_username
from hangout_app.schemas import hangout_to_dict

def do_purge(skip_queue, now):
    if now is not None:
        # Purging "as of" some other time only makes sense in-process.
        print(purge_expired_chats(isoparse(now).replace(tzinfo=None)))
    else:
        fn = task_purge_expired_chats if skip_queue else task_purge_expired_chats.delay
        print(fn())

def do_overlaps(user_a, user_b):
    for w in find_overlaps(user_id(user_a), user_id(user_b)):
        print(w)

def do_hangout(hangout_id):
    h = get_hangout(hangout_id)
    pprint(hangout_to_dict(h, participants_of(hangout_id)))
    if h.group_chat_id is not None:
        participants = chat_participants(h.group_chat_id)
        print(f'chat {h.group_chat_id}: expires_at={h.group_chat.expires_at} '
              f'alive={is_alive(h.group_chat, participants, now())} '
              f'remaining={time_remaining(h.group_chat, participants, now())}')

def do_errors(count):
    q = db.select(ErrorLog).order_by(ErrorLog.id.desc()).limit(count)
    for e in db.session.execute(q).scalars():
        data = e.data
        print(f"{e.id} {e.created_at} {data['src']} {data['exception']}")

def now():
    return datetime.utcnow()

def user_id(s):
    # Accept either an id or a username.
    if s.isdigit():
        return int(s)
    user = find_user_by_username(s)
    if user is None:
        raise SystemExit(f'no user named {s!r}')
    return user.id

def posint(s):
    i = int(s)
    if i <= 0: raise ValueError
    return i

if __name__ == '__main__':
    parser = argparse.ArgumentParser()
    subparsers = parser.add_subparsers(dest='command', required=True)

    parser_purge = subparsers.add_parser('purge', help='Purge messages of expired chats.')
    parser_purge.add_argument('--skip-queue', action='store_true', help='skip task queue')
    parser_purge.add_argument('--now', help='purge as of this (ISO 8601, UTC) time instead; implies --skip-queue')
    parser_purge.set_defaults(fn=do_purge)

    parser_overlaps = subparsers.add_parser('overlaps', help='Show the free time two users have in common.')
    parser_overlaps.add_argument('user_a', help='user id or username')
    parser_overlaps.add_argument('user_b', help='user id or username')
    parser_overlaps.set_defaults(fn=do_overlaps)

    parser_hangout = subparsers.add_parser('hangout', help='Show the state of a hangout.')
    parser_hangout.add_argument('hangout_id', type=posint)
    parser_hangout.set_defaults(fn=do_hangout)

    parser_errors = subparsers.add_parser('errors', help='Show recent errors.')
    parser_errors.add_argument('-n', '--count', type=posint, default=20)
    parser_errors.set_defaults(fn=do_errors)

    args = parser.parse_args()
    with app.app_context():
        args.fn(**{k:v for k,v in vars(args).items() if not k in ['command', 'fn']})
