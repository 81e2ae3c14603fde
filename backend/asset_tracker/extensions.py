# Overview: Flask extension instances for database and migrations.

from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

# Bound to the application in create_app(); never configured at import time.
db = SQLAlchemy()
migrate = Migrate()
