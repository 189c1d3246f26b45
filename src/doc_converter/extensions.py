from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

from doc_converter.services.engine import OfficeEngine

db = SQLAlchemy()
migrate = Migrate()
office_engine = OfficeEngine()
