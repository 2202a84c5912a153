import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///quizpool.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Room storage backend: 'memory' (process lifetime) or 'sql'
    ROOM_STORE = os.environ.get('ROOM_STORE', 'memory')
    # Question bank JSON; empty uses the bundled bank
    QUESTION_BANK_PATH = os.environ.get('QUESTION_BANK_PATH') or None
    DEFAULT_MAX_PLAYERS = int(os.environ.get('DEFAULT_MAX_PLAYERS', '4'))
    # Elapsed time assumed when a submission omits timeTaken (no speed bonus)
    DEFAULT_TIME_SPENT_SEC = float(os.environ.get('DEFAULT_TIME_SPENT_SEC', '30'))
    CORS_ORIGINS = [o.strip() for o in os.environ.get('CORS_ORIGINS', 'http://localhost:3000,http://127.0.0.1:3000').split(',') if o.strip()]
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
