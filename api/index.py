"""
Serverless entry point for the Maintenance Logbook API
"""
import os
import sys

# Add parent directory to path
parent_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if parent_dir not in sys.path:
    sys.path.insert(0, parent_dir)

# Writable locations on serverless platforms
os.environ.setdefault("ENVIRONMENT", "production")
os.environ.setdefault("UPLOAD_DIR", "/tmp/uploads")

from mangum import Mangum
from src.main import app

# ASGI handler; lifespan disabled, the engine is created on cold start
from src.infrastructure.database import init_database

init_database()
handler = Mangum(app, lifespan="off")
