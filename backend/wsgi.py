try:
    from backend.liargame.server import create_app
except ImportError:  # pragma: no cover
    from liargame.server import create_app

app, socketio = create_app()
