"""Flask extensions, created once and bound in the app factory."""

from __future__ import annotations

from apscheduler.schedulers.background import BackgroundScheduler
from flasgger import Swagger
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

db: SQLAlchemy = SQLAlchemy()
migrate: Migrate = Migrate()
jwt: JWTManager = JWTManager()
swagger: Swagger = Swagger()
cors: CORS = CORS()
scheduler: BackgroundScheduler = BackgroundScheduler()
