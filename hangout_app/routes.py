from datetime import datetime
from flask import request, jsonify
from flask_login import current_user, login_required
from hangout_app import app
from hangout_app.users import user_ref
from hangout_app.availability import get_windows, add_window, delete_window, find_overlaps
from hangout_app.hangouts import create_hangout, update_participant_status, set_hangout_status, add_participant, remove_participant, hangouts_for, participants_of
from hangout_app.chats import set_keep_chat, chats_for, require_member, is_alive, time_remaining
from hangout_app.messages import send_message, messages_for
from hangout_app.repository import get_hangout, get_chat, chat_participants
from hangout_app.errors import AuthorizationError
from hangout_app.schemas import (
  parse, WindowIn, HangoutIn, StatusIn, ParticipantIn, KeepIn, MessageIn,
  window_to_dict, hangout_to_dict, chat_to_dict, message_to_dict)

# Sign in lives with the account system. Everything here acts as
# `current_user`.

def actor():
  return user_ref(current_user)

def body(model):
  return parse(model, request.get_json(silent=True))

def chat_json(chat, now):
  participants = chat_participants(chat.id)
  return chat_to_dict(chat, participants,
                      is_alive(chat, participants, now),
                      time_remaining(chat, participants, now))

@app.route('/api/users/<int:user_id>/windows', methods=['GET'])
@login_required
def user_windows(user_id):
  return jsonify([window_to_dict(w) for w in get_windows(user_id)])

@app.route('/api/windows', methods=['POST'])
@login_required
def new_window():
  data = body(WindowIn)
  w = add_window(actor(), data.day_of_week, data.start_time, data.end_time)
  return jsonify(window_to_dict(w)), 201

@app.route('/api/windows/<int:id>', methods=['DELETE'])
@login_required
def remove_window(id):
  delete_window(actor(), id)
  return '', 204

@app.route('/api/overlaps/<int:other_id>', methods=['GET'])
@login_required
def overlaps(other_id):
  return jsonify([w.to_dict() for w in find_overlaps(current_user.id, other_id)])

@app.route('/api/hangouts', methods=['GET'])
@login_required
def hangouts():
  return jsonify([hangout_to_dict(h) for h in hangouts_for(current_user.id)])

@app.route('/api/hangouts', methods=['POST'])
@login_required
def new_hangout():
  data = body(HangoutIn)
  h = create_hangout(actor(), data.to_window(current_user.id), current_user.id, data.participant_ids)
  return jsonify(hangout_to_dict(get_hangout(h.id))), 201

@app.route('/api/hangouts/<int:id>', methods=['GET'])
@login_required
def hangout(id):
  h = get_hangout(id)
  participants = participants_of(id)
  if current_user.id not in [p.user_id for p in participants] + [h.creator_id]:
    raise AuthorizationError(f'user {current_user.id} is not part of hangout {id}')
  return jsonify(hangout_to_dict(h, participants))

@app.route('/api/hangouts/<int:id>/status', methods=['POST'])
@login_required
def hangout_status(id):
  data = body(StatusIn)
  set_hangout_status(actor(), id, data.status)
  return jsonify(hangout_to_dict(get_hangout(id)))

@app.route('/api/hangouts/<int:id>/response', methods=['POST'])
@login_required
def hangout_response(id):
  data = body(StatusIn)
  update_participant_status(actor(), id, current_user.id, data.status)
  return jsonify(hangout_to_dict(get_hangout(id)))

@app.route('/api/hangouts/<int:id>/participants', methods=['POST'])
@login_required
def hangout_add_participant(id):
  data = body(ParticipantIn)
  add_participant(actor(), id, data.user_id)
  return jsonify(hangout_to_dict(get_hangout(id), participants_of(id))), 201

@app.route('/api/hangouts/<int:id>/participants/<int:user_id>', methods=['DELETE'])
@login_required
def hangout_remove_participant(id, user_id):
  remove_participant(actor(), id, user_id)
  return jsonify(hangout_to_dict(get_hangout(id), participants_of(id)))

@app.route('/api/chats', methods=['GET'])
@login_required
def chats():
  now = datetime.utcnow()
  return jsonify([chat_json(c, now) for c in chats_for(current_user.id)])

@app.route('/api/chats/<int:id>', methods=['GET'])
@login_required
def chat(id):
  c = get_chat(id)
  require_member(id, current_user.id)
  return jsonify(chat_json(c, datetime.utcnow()))

@app.route('/api/chats/<int:id>/keep', methods=['POST'])
@login_required
def chat_keep(id):
  data = body(KeepIn)
  set_keep_chat(actor(), id, current_user.id, data.keep)
  return jsonify(chat_json(get_chat(id), datetime.utcnow()))

@app.route('/api/chats/<int:id>/messages', methods=['GET'])
@login_required
def chat_messages(id):
  get_chat(id)
  require_member(id, current_user.id)
  since_id = request.args.get('since_id', type=int)
  return jsonify([message_to_dict(m) for m in messages_for(id, since_id)])

@app.route('/api/chats/<int:id>/messages', methods=['POST'])
@login_required
def chat_send_message(id):
  data = body(MessageIn)
  m = send_message(actor(), id, data.content)
  return jsonify(message_to_dict(m)), 201
