from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

# engine options come from config (SQLALCHEMY_ENGINE_OPTIONS)
db = SQLAlchemy()
migrate = Migrate()
