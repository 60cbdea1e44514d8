import os
import tempfile


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")

    BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    INSTANCE_DIR = os.path.join(BASE_DIR, "instance")

    UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER") or os.path.join(INSTANCE_DIR, "uploads")

    DB_PATH = os.path.join(INSTANCE_DIR, "app.db")

    SQLALCHEMY_DATABASE_URI = os.getenv(
        "SQLALCHEMY_DATABASE_URI",
        "sqlite:///" + DB_PATH.replace("\\", "/"),
    )

    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # uploads via celular (fotos de pedidos/laudos)
    MAX_CONTENT_LENGTH = int(os.getenv("MAX_CONTENT_LENGTH", str(10 * 1024 * 1024)))

    # listas (links temporários)
    LIST_MAX_ITEMS = int(os.getenv("LIST_MAX_ITEMS", "200"))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    WTF_CSRF_ENABLED = False
    UPLOAD_FOLDER = os.path.join(tempfile.gettempdir(), "regulacao-test-uploads")
    LOG_LEVEL = "DEBUG"
