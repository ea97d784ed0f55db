import logging

import uvicorn

from email_verification.config import settings

if __name__ == "__main__":
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "email_verification.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
    )
