import uvicorn

from utils import config
from utils.logger import configure_server_logging


def main() -> None:
    configure_server_logging()
    uvicorn.run("api.app:app", host=config.API_HOST, port=config.API_PORT, log_config=None)


if __name__ == "__main__":
    main()
