import logging
import sys

import uvicorn

from smart_parking.config import settings

if __name__ == '__main__':
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # factory mode: each (re)load builds a fresh app with its own slot registry
    uvicorn.run(
        'smart_parking.server:create_app',
        factory=True,
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL,
        reload=settings.RELOAD,
    )
