import json
from enum import IntEnum, unique
from datetime import datetime
from flask_login import UserMixin
from hangout_app import db
from hangout_app import login_manager

@login_manager.user_loader
def load_user(id):
  return db.session.get(User, int(id))

@unique
class Status(IntEnum):
  PENDING = 0
  ACCEPTED = 1
  DECLINED = 2
  RESCHEDULED = 3

  @classmethod
  def from_name(cls, name):
    return cls[name.upper()]

  @property
  def label(self):
    return self.name.lower()

TERMINAL_STATES = (Status.ACCEPTED, Status.DECLINED, Status.RESCHEDULED)

class User(db.Model, UserMixin):
  """
  Identity and profile data belong to the account system. The core
  only reads `id` and `is_pro`.
  """
  __tablename__ = 'users'
  id = db.Column(db.Integer, primary_key = True)
  username = db.Column(db.String(64), unique = True, nullable = False)
  full_name = db.Column(db.String(100), nullable = False, default = '')
  # "pro" subscribers may keep group chats past their expiry.
  is_pro = db.Column(db.Boolean, nullable = False, default = False)
  created_at = db.Column(db.DateTime, nullable = False, default = datetime.utcnow)
  windows = db.relationship('AvailabilityWindow', back_populates = 'user')

class AvailabilityWindow(db.Model):
  __tablename__ = 'availability_windows'
  id = db.Column(db.Integer, primary_key = True)
  user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable = False, index = True)
  user = db.relationship('User', back_populates = 'windows')
  # 0 (Sunday) through 6 (Saturday)
  day_of_week = db.Column(db.Integer, nullable = False)
  # wall-clock, no timezone
  start_time = db.Column(db.Time, nullable = False)
  end_time = db.Column(db.Time, nullable = False)
  created_at = db.Column(db.DateTime, nullable = False, default = datetime.utcnow)
  __table_args__ = (
    db.CheckConstraint('day_of_week >= 0 AND day_of_week <= 6', name='availability_windows_day_of_week_check'),
    db.CheckConstraint('start_time < end_time', name='availability_windows_start_before_end_check'),
  )
  def __repr__(self):
    return f'<AvailabilityWindow id={self.id} user_id={self.user_id} day={self.day_of_week} {self.start_time}-{self.end_time}>'

class HangoutRequest(db.Model):
  __tablename__ = 'hangout_requests'
  id = db.Column(db.Integer, primary_key = True)
  creator_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable = False, index = True)
  creator = db.relationship('User')
  day_of_week = db.Column(db.Integer, nullable = False)
  start_time = db.Column(db.Time, nullable = False)
  end_time = db.Column(db.Time, nullable = False)
  status = db.Column(db.Integer, nullable = False, default = Status.PENDING)
  # Set exactly once, in the transaction that moves status to ACCEPTED.
  group_chat_id = db.Column(db.Integer, db.ForeignKey('group_chats.id', name='hangout_requests_group_chat_id_fkey', use_alter=True), nullable = True, unique = True)
  group_chat = db.relationship('GroupChat', foreign_keys=[group_chat_id], post_update=True)
  created_at = db.Column(db.DateTime, nullable = False, default = datetime.utcnow)
  participants = db.relationship('HangoutParticipant', back_populates = 'hangout',
                                 order_by = 'HangoutParticipant.id',
                                 cascade = 'all, delete-orphan')
  @property
  def status_name(self):
    return Status(self.status).label
  def is_pending(self):
    return self.status == Status.PENDING
  def is_accepted(self):
    return self.status == Status.ACCEPTED
  def is_terminal(self):
    return self.status in TERMINAL_STATES
  @property
  def participant_ids(self):
    return [p.user_id for p in self.participants]
  def __repr__(self):
    return f'<HangoutRequest id={self.id} creator_id={self.creator_id} status={self.status_name}>'

class HangoutParticipant(db.Model):
  __tablename__ = 'hangout_participants'
  id = db.Column(db.Integer, primary_key = True)
  hangout_id = db.Column(db.Integer, db.ForeignKey('hangout_requests.id'), nullable = False, index = True)
  hangout = db.relationship('HangoutRequest', back_populates = 'participants')
  user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable = False, index = True)
  user = db.relationship('User')
  # This participant's own response. Same domain as the request status.
  status = db.Column(db.Integer, nullable = False, default = Status.PENDING)
  created_at = db.Column(db.DateTime, nullable = False, default = datetime.utcnow)
  __table_args__ = (db.UniqueConstraint('hangout_id', 'user_id'),)
  @property
  def status_name(self):
    return Status(self.status).label

class GroupChat(db.Model):
  __tablename__ = 'group_chats'
  id = db.Column(db.Integer, primary_key = True)
  # At most one chat per hangout. This is what stops two racing "last
  # acceptors" from both provisioning a chat.
  hangout_id = db.Column(db.Integer, db.ForeignKey('hangout_requests.id'), nullable = False, unique = True)
  hangout = db.relationship('HangoutRequest', foreign_keys=[hangout_id])
  expires_at = db.Column(db.DateTime, nullable = False)
  is_permanent = db.Column(db.Boolean, nullable = False, default = False)
  created_at = db.Column(db.DateTime, nullable = False, default = datetime.utcnow)
  # Set by housekeeping once the messages of an expired chat are gone.
  purged_at = db.Column(db.DateTime, nullable = True)
  participants = db.relationship('ChatParticipant', back_populates = 'chat',
                                 order_by = 'ChatParticipant.id')
  messages = db.relationship('Message', back_populates = 'chat',
                             order_by = 'Message.created_at, Message.id')
  @property
  def is_kept(self):
    return any(p.keep_chat for p in self.participants)
  @property
  def member_ids(self):
    return [p.user_id for p in self.participants]

class ChatParticipant(db.Model):
  __tablename__ = 'chat_participants'
  id = db.Column(db.Integer, primary_key = True)
  chat_id = db.Column(db.Integer, db.ForeignKey('group_chats.id'), nullable = False, index = True)
  chat = db.relationship('GroupChat', back_populates = 'participants')
  user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable = False, index = True)
  user = db.relationship('User')
  keep_chat = db.Column(db.Boolean, nullable = False, default = False)
  joined_at = db.Column(db.DateTime, nullable = False, default = datetime.utcnow)
  __table_args__ = (db.UniqueConstraint('chat_id', 'user_id'),)

class Message(db.Model):
  __tablename__ = 'messages'
  id = db.Column(db.Integer, primary_key = True)
  chat_id = db.Column(db.Integer, db.ForeignKey('group_chats.id'), nullable = False)
  chat = db.relationship('GroupChat', back_populates = 'messages')
  user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable = False)
  user = db.relationship('User')
  content = db.Column(db.Text, nullable = False)
  created_at = db.Column(db.DateTime, nullable = False, default = datetime.utcnow)
  db.Index('ix_messages_chat_id_created_at', chat_id, created_at)

class ErrorLog(db.Model):
  __tablename__ = 'error_log'
  id = db.Column(db.Integer, primary_key = True)
  created_at = db.Column(db.DateTime, nullable = False, default = datetime.utcnow)
  jsondata = db.Column(db.Text, nullable = False)
  @property
  def data(self):
    return json.loads(self.jsondata)
  @data.setter
  def data(self, val):
    self.jsondata = json.dumps(val)
