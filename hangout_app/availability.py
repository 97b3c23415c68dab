from hangout_app import app, db
from hangout_app.models import AvailabilityWindow
from hangout_app.windows import Window
from hangout_app.users import get_user, require_self
from hangout_app.repository import commit, get_window, windows_for
from hangout_app.errors import ValidationError

# Availability windows
# --------------------
#
# Windows recur weekly and are owned by a single user. A user may have
# several windows on the same day, and they need not be disjoint. A
# window is never edited in place: delete it and add another.

def get_windows(user_id):
    get_user(user_id)
    return windows_for(user_id)

def add_window(actor, day_of_week, start_time, end_time):
    window = Window.from_strings(day_of_week, start_time, end_time, actor.id)
    if not window.is_valid():
        raise ValidationError(f'invalid window: day {day_of_week}, {start_time}-{end_time}')
    record = AvailabilityWindow(user_id=actor.id,
                                day_of_week=window.day_of_week,
                                start_time=window.start_time,
                                end_time=window.end_time)
    db.session.add(record)
    commit()
    return record

def delete_window(actor, window_id):
    record = get_window(window_id)
    require_self(actor, record.user_id)
    db.session.delete(record)
    commit()

# Pairwise scan, O(n*m). Users have tens of windows per week, not
# thousands, so nothing cleverer is needed.
def overlapping_windows(windows_a, windows_b):
    out = []
    for wa in windows_a:
        for wb in windows_b:
            w = wa.intersect(wb)
            if w is not None:
                out.append(w)
    return out

def find_overlaps(user_a_id, user_b_id):
    """
    Times when both users are free, one window per overlapping pair of
    their availability windows. The result is not persisted and is
    not in any particular order. Each overlap is tagged with
    `user_a_id` as its reference user.
    """
    get_user(user_a_id)
    get_user(user_b_id)
    if user_a_id == user_b_id:
        return []
    windows_a = [Window.from_record(w) for w in windows_for(user_a_id)]
    windows_b = [Window.from_record(w) for w in windows_for(user_b_id)]
    overlaps = overlapping_windows(windows_a, windows_b)
    app.logger.debug('found %d overlaps between users %s and %s', len(overlaps), user_a_id, user_b_id)
    return overlaps
