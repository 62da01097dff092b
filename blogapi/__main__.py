import uvicorn

from .config import load_settings
from .main import create_app


def main():
    settings = load_settings()
    # uvicorn turns SIGINT/SIGTERM into a lifespan shutdown
    uvicorn.run(create_app(settings), host='0.0.0.0', port=settings.port)


if __name__ == '__main__':
    main()
