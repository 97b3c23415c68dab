from setuptools import setup

setup(
    name='hangouts',
    packages=['hangout_app'],
    include_package_data=True,
    install_requires=[
        'flask',
        'SQLAlchemy',
        'Flask-SQLAlchemy',
        'Flask-Migrate',
        'flask-login',
        'psycopg2-binary',
        'python-dateutil',
        'celery',
        'pydantic',
    ],
    extras_require={
        'dev': [
            'pytest',
            'sqlalchemy-utils',
        ],
    },
)
