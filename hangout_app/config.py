import os
import tempfile
from datetime import timedelta

def get_database_uri(env='development') -> str:
  if env == 'test':
    default = 'sqlite:///' + os.path.join(tempfile.gettempdir(), 'hangouts_test.db')
    return os.environ.get('HANGOUTS_TEST_DATABASE_URI') or default
  elif env == 'development':
    dbname = 'hangouts'
    username = os.environ.get('POSTGRES_USERNAME') or ''
    password = os.environ.get('POSTGRES_PASSWORD') or ''
    host = 'localhost'
    port = 5432
  elif env == 'production':
    dbname = os.environ['RDS_DB_NAME']
    username = os.environ['RDS_USERNAME']
    password = os.environ['RDS_PASSWORD']
    host = os.environ['RDS_HOSTNAME']
    port = os.environ['RDS_PORT']
  else:
    raise Exception('Unknown environment.')

  return f'postgresql://{username}:{password}@{host}:{port}/{dbname}'

def mkconfig(env):
  dburi = get_database_uri(env)
  return dict(
    ENV_NAME = env,
    TESTING = env == 'test',
    SECRET_KEY = os.environ.get('HANGOUTS_SECRET_KEY') or 'secret_tunnel',
    SQLALCHEMY_DATABASE_URI = dburi,
    SQLALCHEMY_TRACK_MODIFICATIONS = False,
    # SQLALCHEMY_ECHO = True,
    CELERY_BROKER_URL = f'sqla+{dburi}',
    PERMANENT_SESSION_LIFETIME = timedelta(days=7),
    # Group chats are ephemeral unless kept by a pro participant.
    CHAT_LIFETIME = timedelta(days=3),
    CHAT_PURGE_INTERVAL = timedelta(hours=1),
    MESSAGE_MAX_LENGTH = 2000,
  )
