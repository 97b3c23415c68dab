import traceback
from flask import jsonify, request
from flask_login import current_user
from werkzeug.exceptions import HTTPException
from hangout_app import app, db
from hangout_app.models import ErrorLog

# Every failure the core surfaces is one of these. The http status is
# only used by the json api.

class HangoutError(Exception):
  status_code = 500
  kind = 'error'
  def __init__(self, message=''):
    super().__init__(message)
    self.message = message
  def to_dict(self):
    return dict(error=self.kind, message=self.message)

class ValidationError(HangoutError):
  # invalid window, empty participant set, malformed input
  status_code = 400
  kind = 'validation'

class AuthorizationError(HangoutError):
  # acting on behalf of another user, non-pro keeping a chat
  status_code = 403
  kind = 'authorization'

class NotFoundError(HangoutError):
  status_code = 404
  kind = 'not_found'

class ConflictError(HangoutError):
  # illegal state transition
  status_code = 409
  kind = 'conflict'

class StorageError(HangoutError):
  # the caller may retry
  status_code = 503
  kind = 'storage'

@app.errorhandler(HangoutError)
def hangout_error(error):
  db.session.rollback()
  return jsonify(error.to_dict()), error.status_code

@app.errorhandler(HTTPException)
def http_error(error):
  return jsonify(dict(error=error.name.lower().replace(' ', '_'), message=error.description)), error.code

@app.errorhandler(500)
def internal_error(error):
  db.session.rollback()
  exception = getattr(error, 'original_exception', None) or error
  tb = ''.join(traceback.format_exception(None, exception, tb=exception.__traceback__))
  e = ErrorLog()
  e.data = dict(src='web',
                detail=dict(url=request.url,
                            method=request.method,
                            user_id=current_user.id if current_user.is_authenticated else None),
                exception=type(exception).__name__,
                tb=tb)
  db.session.add(e)
  db.session.commit()
  app.logger.error('unhandled %s on %s %s', type(exception).__name__, request.method, request.path)
  return jsonify(dict(error='internal', message='internal server error')), 500
