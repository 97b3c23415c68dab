from datetime import time
from hangout_app.errors import ValidationError

# Windows
# -------
#
# 1. a window is the interval [start_time, end_time) on a weekday,
# where 0 is Sunday and 6 is Saturday.
# 2. times are wall-clock times of day with no timezone. both sides of
# an overlap computation are assumed to share a reference zone.
# 3. windows never wrap past midnight, so a valid window has
# start_time < end_time.
# 4. windows on different days never overlap.

DAYS = range(7)

TIME_FORMAT = '%H:%M:%S'

def parse_time(s):
    if isinstance(s, time):
        return s
    if not isinstance(s, str):
        raise ValidationError(f'expected a time of day, got {s!r}')
    parts = s.split(':')
    if len(parts) not in (2, 3) or not all(p.isdigit() and len(p) == 2 for p in parts):
        raise ValidationError(f'malformed time of day {s!r}, expected HH:MM:SS')
    try:
        return time(*(int(p) for p in parts))
    except ValueError as e:
        raise ValidationError(f'malformed time of day {s!r}') from e

def format_time(t):
    return t.strftime(TIME_FORMAT)

class Window:
    def __init__(self, day_of_week, start_time, end_time, user_id=None):
        self.day_of_week = day_of_week
        self.start_time = start_time
        self.end_time = end_time
        # the user this window belongs to, or for overlaps, the
        # reference user it was computed for
        self.user_id = user_id

    @classmethod
    def from_record(cls, record):
        return cls(record.day_of_week, record.start_time, record.end_time, record.user_id)

    @classmethod
    def from_strings(cls, day_of_week, start_time, end_time, user_id=None):
        return cls(day_of_week, parse_time(start_time), parse_time(end_time), user_id)

    def is_valid(self):
        return (type(self.day_of_week) == int and
                self.day_of_week in DAYS and
                self.start_time < self.end_time)

    def validate(self):
        if not self.is_valid():
            raise ValidationError(f'invalid window: {self}')
        return self

    def intersect(self, other):
        if self.day_of_week != other.day_of_week:
            return None
        start = max(self.start_time, other.start_time)
        end = min(self.end_time, other.end_time)
        if start < end:
            return Window(self.day_of_week, start, end, self.user_id)
        return None

    def key(self):
        return (self.day_of_week, self.start_time, self.end_time)

    def __eq__(self, other):
        return isinstance(other, Window) and self.key() == other.key()

    def __hash__(self):
        return hash(self.key())

    def __repr__(self):
        return f'<Window day={self.day_of_week} {format_time(self.start_time)}-{format_time(self.end_time)} user_id={self.user_id}>'

    def to_dict(self):
        return dict(user_id=self.user_id,
                    day_of_week=self.day_of_week,
                    start_time=format_time(self.start_time),
                    end_time=format_time(self.end_time))
