"""Run the API with uvicorn: python -m wxcc_overrides"""

import uvicorn

from . import config


def main() -> None:
    uvicorn.run(
        "wxcc_overrides.main:app",
        host=config.HOST,
        port=config.PORT,
        reload=config.ENVIRONMENT == "development",
        log_config=None,
    )


if __name__ == "__main__":
    main()
