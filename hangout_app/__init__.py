import os
import sys
from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager
from celery import Celery
from hangout_app.config import mkconfig

# https://flask.palletsprojects.com/en/2.0.x/patterns/celery/
def make_celery(app):
    celery = Celery(app.import_name, broker=app.config['CELERY_BROKER_URL'])

    # https://docs.celeryq.dev/en/stable/userguide/periodic-tasks.html#beat-entries
    celery.conf.beat_schedule = {
        'purge_expired_chats': {
            'task': 'hangout_app.tasks.task_purge_expired_chats',
            'schedule': app.config['CHAT_PURGE_INTERVAL'],
            'args': []
        },
    }

    class ContextTask(celery.Task):
        def __call__(self, *args, **kwargs):
            with app.app_context():
                return self.run(*args, **kwargs)

    celery.Task = ContextTask
    return celery

if 'pytest' in sys.modules or os.path.basename(sys.argv[0]) == 'pytest':
    os.environ['FLASK_ENV'] = 'test'
elif not 'FLASK_ENV' in os.environ:
    os.environ['FLASK_ENV'] = 'development'
app = Flask(__name__)
app.config.update(**mkconfig(os.environ['FLASK_ENV']))

db = SQLAlchemy(app)
migrate = Migrate(app, db, directory=os.path.join(os.path.dirname(__file__), 'migrations'))
celery = make_celery(app)

login_manager = LoginManager(app)

from hangout_app import models, routes, errors, tasks
