import os
from dotenv import load_dotenv
load_dotenv()

class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///mobytranscript.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    # optional: when set, transcription locks are shared across workers via Redis
    REDIS_URL = os.getenv("REDIS_URL")
    TRANSCRIBE_LOCK_TIMEOUT = int(os.getenv("TRANSCRIBE_LOCK_TIMEOUT", "300"))

    STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "local")
    LOCAL_STORAGE_DIR = os.getenv("LOCAL_STORAGE_DIR", "./storage")
    S3_ENDPOINT = os.getenv("S3_ENDPOINT")
    S3_REGION = os.getenv("S3_REGION")
    S3_BUCKET = os.getenv("S3_BUCKET")
    S3_ACCESS_KEY = os.getenv("S3_ACCESS_KEY")
    S3_SECRET_KEY = os.getenv("S3_SECRET_KEY")

    # uploads above MAX_UPLOAD_BYTES get a 413 from the upload route; the
    # request-level cap leaves room for multipart overhead
    MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(50 * 1024 * 1024)))
    MAX_CONTENT_LENGTH = MAX_UPLOAD_BYTES + 1024 * 1024

    ASSEMBLYAI_API_KEY = os.getenv("ASSEMBLYAI_API_KEY")
    OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
    DEEPGRAM_API_KEY = os.getenv("DEEPGRAM_API_KEY")
    ELEVENLABS_API_KEY = os.getenv("ELEVENLABS_API_KEY")

    TRANSCRIBE_LANGUAGE = os.getenv("TRANSCRIBE_LANGUAGE", "pt")
    DEEPGRAM_LANGUAGE = os.getenv("DEEPGRAM_LANGUAGE", "pt-BR")
    ASSEMBLYAI_POLL_INTERVAL = float(os.getenv("ASSEMBLYAI_POLL_INTERVAL", "2"))
    ASSEMBLYAI_MAX_POLLS = int(os.getenv("ASSEMBLYAI_MAX_POLLS", "60"))
    ELEVENLABS_MODEL_ID = os.getenv("ELEVENLABS_MODEL_ID", "eleven_multilingual_v2")

    USERS_SERVICE_API_URL = os.getenv("USERS_SERVICE_API_URL", "https://getmocha.com/u")
    USERS_SERVICE_API_KEY = os.getenv("USERS_SERVICE_API_KEY")
    USERS_SESSION_COOKIE = os.getenv("USERS_SESSION_COOKIE", "mocha_session_token")
    USERS_SESSION_MAX_AGE = 60 * 24 * 60 * 60


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    REDIS_URL = None
    STORAGE_BACKEND = "local"
    ASSEMBLYAI_API_KEY = None
    OPENAI_API_KEY = None
    DEEPGRAM_API_KEY = None
    ELEVENLABS_API_KEY = None
    USERS_SERVICE_API_URL = "https://users.test"
    USERS_SERVICE_API_KEY = "users-key"
    ASSEMBLYAI_POLL_INTERVAL = 0
    LOG_LEVEL = "DEBUG"
