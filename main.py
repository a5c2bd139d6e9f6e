import uvicorn

from knowcode.app import app
from knowcode.config import HOST, PORT


def run() -> None:
    uvicorn.run(app, host=HOST, port=PORT)


if __name__ == "__main__":
    run()
