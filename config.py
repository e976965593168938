import os
from dotenv import load_dotenv

load_dotenv()

MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017")
DB_NAME = os.getenv("DB_NAME", "learnix")

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "dev")
JWT_EXPIRES_HOURS = int(os.getenv("JWT_EXPIRES_HOURS", 8))
AUTH_HEADER = "x-auth-token"

CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

MIN_PASSWORD_LENGTH = 6

# Default admin account created by `flask seed-admin`
ADMIN_NAME = os.getenv("ADMIN_NAME", "Admin User")
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@learnix.com")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin")

PORT = int(os.getenv("PORT", 5001))
