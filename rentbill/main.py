"""Rentbill API server entry point: python -m rentbill.main"""

from dotenv import load_dotenv

# Load .env before anything reads the configuration
load_dotenv()

import uvicorn  # noqa: E402

from rentbill.services.config import get_config  # noqa: E402
from rentbill.services.logging import setup_server_logging  # noqa: E402


def main() -> None:
    config = get_config()
    setup_server_logging(config.log_file, config.log_level)
    uvicorn.run("rentbill.api.app:app", host=config.host, port=config.port)


if __name__ == "__main__":
    main()
