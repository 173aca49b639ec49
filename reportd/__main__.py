import uvicorn

from reportd.config import settings

if __name__ == "__main__":
    uvicorn.run("reportd.main:app", host=settings.host, port=settings.port)
