import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev")

    # CORS
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    # Reverse proxy / IP headers
    TRUST_PROXY_HEADERS = os.environ.get("TRUST_PROXY_HEADERS", "1") == "1"

    # Empty means auto-detect (see server.create_app)
    SOCKETIO_ASYNC_MODE = os.environ.get("SOCKETIO_ASYNC_MODE", "").strip()

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

    # Rooms
    MIN_PLAYERS = int(os.environ.get("MIN_PLAYERS", "3"))
    MAX_PLAYERS = int(os.environ.get("MAX_PLAYERS", "8"))
    NICKNAME_MAX_LENGTH = int(os.environ.get("NICKNAME_MAX_LENGTH", "16"))
    AVATAR_MAX_LENGTH = int(os.environ.get("AVATAR_MAX_LENGTH", "64"))
    ROOM_CODE_MAX_LENGTH = int(os.environ.get("ROOM_CODE_MAX_LENGTH", "16"))
    ROOM_TTL_SEC = int(os.environ.get("ROOM_TTL_SEC", "3600"))
    ROOM_SWEEP_INTERVAL_SEC = int(os.environ.get("ROOM_SWEEP_INTERVAL_SEC", "600"))

    # Game
    CHAT_MAX_LENGTH = int(os.environ.get("CHAT_MAX_LENGTH", "200"))
    VOTE_TIME_LIMIT_SEC = int(os.environ.get("VOTE_TIME_LIMIT_SEC", "60"))
    VOTE_GRACE_SEC = int(os.environ.get("VOTE_GRACE_SEC", "2"))
