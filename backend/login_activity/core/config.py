import os

BACKEND_TOKEN = os.environ.get("BACKEND_TOKEN", "")
BACKEND_PORT = int(os.environ.get("BACKEND_PORT", "49671"))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

# Google Admin Reports credentials
GOOGLE_CREDENTIALS_FILE = os.environ.get("GOOGLE_CREDENTIALS_FILE", "")
GOOGLE_IMPERSONATED_USER = os.environ.get("GOOGLE_IMPERSONATED_USER", "")
GOOGLE_ACCESS_TOKEN = os.environ.get("GOOGLE_ACCESS_TOKEN", "")
GOOGLE_REFRESH_TOKEN = os.environ.get("GOOGLE_REFRESH_TOKEN", "")
GOOGLE_CLIENT_ID = os.environ.get("GOOGLE_CLIENT_ID", "")
GOOGLE_CLIENT_SECRET = os.environ.get("GOOGLE_CLIENT_SECRET", "")
