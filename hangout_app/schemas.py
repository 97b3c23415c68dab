from typing import List
import pydantic
from pydantic import BaseModel, Field, field_validator
from hangout_app.windows import Window, format_time, parse_time
from hangout_app.errors import ValidationError as HangoutValidationError

# Request bodies for the json api.

STATUS_NAMES = ('pending', 'accepted', 'declined', 'rescheduled')

class WindowIn(BaseModel):
  day_of_week: int = Field(ge=0, le=6)
  start_time: str
  end_time: str

  @field_validator('start_time', 'end_time')
  @classmethod
  def check_time(cls, v):
    try:
      parse_time(v)
    except HangoutValidationError as e:
      raise ValueError(e.message) from e
    return v

  def to_window(self, user_id=None):
    return Window.from_strings(self.day_of_week, self.start_time, self.end_time, user_id)

class HangoutIn(WindowIn):
  participant_ids: List[int]

class StatusIn(BaseModel):
  status: str

  @field_validator('status')
  @classmethod
  def check_status(cls, v):
    if v not in STATUS_NAMES:
      raise ValueError(f'status must be one of {", ".join(STATUS_NAMES)}')
    return v

class ParticipantIn(BaseModel):
  user_id: int

class KeepIn(BaseModel):
  keep: bool

class MessageIn(BaseModel):
  content: str = Field(min_length=1)

def parse(model, data):
  if data is None:
    raise HangoutValidationError('expected a json body')
  try:
    return model.model_validate(data)
  except pydantic.ValidationError as e:
    raise HangoutValidationError('; '.join(f"{'.'.join(str(l) for l in err['loc'])}: {err['msg']}" for err in e.errors())) from e

# Responses.

def dt_to_s(dt):
  return dt.isoformat() if dt is not None else None

def td_to_s(td):
  return td.total_seconds() if td is not None else None

def window_to_dict(w):
  return dict(id=w.id,
              user_id=w.user_id,
              day_of_week=w.day_of_week,
              start_time=format_time(w.start_time),
              end_time=format_time(w.end_time))

def participant_to_dict(p):
  return dict(id=p.id, user_id=p.user_id, status=p.status_name)

def hangout_to_dict(h, participants=None):
  if participants is None:
    participants = h.participants
  return dict(id=h.id,
              creator_id=h.creator_id,
              day_of_week=h.day_of_week,
              start_time=format_time(h.start_time),
              end_time=format_time(h.end_time),
              status=h.status_name,
              group_chat_id=h.group_chat_id,
              created_at=dt_to_s(h.created_at),
              participants=[participant_to_dict(p) for p in participants])

def chat_to_dict(chat, participants, alive, remaining):
  return dict(id=chat.id,
              hangout_id=chat.hangout_id,
              created_at=dt_to_s(chat.created_at),
              expires_at=dt_to_s(chat.expires_at),
              is_permanent=chat.is_permanent,
              purged_at=dt_to_s(chat.purged_at),
              is_alive=alive,
              seconds_remaining=td_to_s(remaining),
              participants=[dict(user_id=p.user_id, keep_chat=p.keep_chat) for p in participants])

def message_to_dict(m):
  return dict(id=m.id,
              chat_id=m.chat_id,
              user_id=m.user_id,
              content=m.content,
              created_at=dt_to_s(m.created_at))
