import pytest
from PIL import Image

from doc_converter import create_app
from doc_converter.config import Config
from doc_converter.extensions import db, office_engine


@pytest.fixture
def app(tmp_path):
    class TestConfig(Config):
        TESTING = True
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'test.db'}"
        UPLOAD_FOLDER = str(tmp_path / 'uploads')
        PDF_STORAGE_DIR = str(tmp_path / 'pdf-storage')
        LOG_DIR = str(tmp_path / 'logs')
        OFFICE_PROFILE_DIR = str(tmp_path / 'office-profile')
        OFFICE_ENGINE_AUTOSTART = False

    app = create_app(TestConfig)
    yield app
    office_engine.stop()
    with app.app_context():
        db.session.remove()
        db.engine.dispose()


@pytest.fixture
def app_context(app):
    with app.app_context():
        yield


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_image(tmp_path):
    """Write a solid test image and return its path."""
    def _make(name, size=(200, 100), mode='RGB'):
        path = tmp_path / 'inputs' / name
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.new(mode, size).save(path)
        return str(path)
    return _make
