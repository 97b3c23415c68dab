import pytest
from datetime import datetime
from hangout_app import db, app
from sqlalchemy_utils import database_exists, create_database, drop_database

@pytest.fixture(scope="session")
def create_test_database():
    url = app.config['SQLALCHEMY_DATABASE_URI']
    if database_exists(url):
        if not url.startswith('sqlite'):
            raise Exception(f'database {url} already exists')
        # left behind by an interrupted run
        drop_database(url)
    create_database(url)
    yield
    drop_database(url)

@pytest.fixture(scope="function")
def testdb(create_test_database):
    with app.app_context():
        db.create_all()
        yield
        db.session.close()
        db.drop_all()

@pytest.fixture(scope='function')
def utcnow():
    return datetime.utcnow()

@pytest.fixture(scope='function')
def client(testdb):
    return app.test_client()
