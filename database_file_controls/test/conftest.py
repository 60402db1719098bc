"""
Pytest configuration and fixtures for the database file controls
"""
import os

# create_app refuses to start without a secret key
os.environ.setdefault('SECRET_KEY', 'test_secret_key_for_file_controls')

import pytest
from database_file_controls import create_app
from database_file_controls import db as _db
from database_file_controls.config import AttachmentSettings
from fake_storage import InMemoryStorage

TEST_USERNAME = 'tester'
TEST_PASSWORD = 'tester-password-123'


@pytest.fixture(scope='session')
def app():
    """Create Flask application for testing, backed by an in-memory database"""
    app = create_app({
        'TESTING': True,
        'WTF_CSRF_ENABLED': False,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'ENABLE_HTTPS': False,
        'SESSION_COOKIE_SECURE': False,
        'RATELIMIT_ENABLED': False,
        'MAX_ATTACHMENTS': 3,
    })

    with app.app_context():
        _db.create_all()

    yield app


def empty_tables(app):
    with app.app_context():
        for table in reversed(_db.metadata.sorted_tables):
            _db.session.execute(table.delete())
        _db.session.commit()


@pytest.fixture(scope='function')
def db(app):
    """Database inside an application context; every table is emptied afterwards"""
    with app.app_context():
        yield _db
        _db.session.rollback()
    empty_tables(app)


@pytest.fixture(scope='function')
def client(app):
    """Create Flask test client"""
    yield app.test_client()
    empty_tables(app)


@pytest.fixture(scope='function')
def authenticated_client(app, client):
    """Test client logged in as the test user"""
    from database_file_controls.build import insert_admin_user
    with app.app_context():
        insert_admin_user(TEST_USERNAME, TEST_PASSWORD)

    client.post('/login', data={
        'username': TEST_USERNAME,
        'password': TEST_PASSWORD
    }, follow_redirects=True)
    return client


@pytest.fixture
def settings():
    """Attachment settings with a relative document URL and an absolute image URL"""
    return AttachmentSettings.from_mapping({
        'FileAttachmentHandlerUrl': '/{0}/attachments/download?fileId={1}',
        'ImageHandlerUrl': 'https://images.example.org/{0}/{1}',
        'MaxDocumentUploadBytes': '1000',
        'AllowedDocumentFormats': 'pdf;doc;docx;txt',
    })


@pytest.fixture
def storage():
    return InMemoryStorage()
