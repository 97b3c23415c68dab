from hangout_app import app, celery, db
from hangout_app.models import ErrorLog
from hangout_app.housekeeping import purge_expired_chats

def log_error(task, exception, task_id, args, kwargs, einfo):
    db.session.rollback()
    e = ErrorLog()
    e.data = dict(src='task',
                  detail=dict(name=task.name, args=args, kwargs=kwargs),
                  exception=type(exception).__name__,
                  tb=str(einfo))
    db.session.add(e)
    db.session.commit()
    app.logger.error('task %s failed with %s', task.name, type(exception).__name__)

@celery.task(on_failure=log_error)
def task_purge_expired_chats():
    """
    Runs periodically to drop the messages of chats that have expired
    and that no member chose to keep.
    """
    return purge_expired_chats()
