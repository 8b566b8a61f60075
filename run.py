# run.py

import uvicorn

from app.config import settings

if __name__ == "__main__":
    # Hosting platforms pass the port in PORT
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info",
    )
