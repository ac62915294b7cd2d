from flask_cors import CORS
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

# Bound to the app in create_app(); the db session lives for one app context
db = SQLAlchemy()
migrate = Migrate()
cors = CORS()
