import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Comma-separated list of frontend origins allowed by CORS and Socket.IO
    CORS_ALLOWED_ORIGINS = [
        o.strip() for o in (os.environ.get('CLIENT_URL') or 'http://localhost:3000,http://localhost:5173').split(',')
        if o.strip()
    ]
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/ws')
    PORT = int(os.environ.get('PORT', '3001'))
    ROOM_CODE_LENGTH = int(os.environ.get('ROOM_CODE_LENGTH', '6'))
    # Phase timer: seconds per tick; set autostart off to drive ticks by hand
    PHASE_TICK_SEC = float(os.environ.get('PHASE_TICK_SEC', '1'))
    PHASE_TIMER_AUTOSTART = os.environ.get('PHASE_TIMER_AUTOSTART', '1') not in ('0', 'false', 'False')
    # Optional: fixed seed for role shuffling (reproducible games)
    ROLE_SHUFFLE_SEED = int(os.environ['ROLE_SHUFFLE_SEED']) if os.environ.get('ROLE_SHUFFLE_SEED') else None
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
