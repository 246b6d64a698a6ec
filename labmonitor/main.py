from prometheus_fastapi_instrumentator import Instrumentator

from labmonitor.app import create_app
from labmonitor.core.config import settings
from labmonitor.core.logging import configure_logging

configure_logging()
app = create_app()
instrumentator = Instrumentator()
instrumentator.instrument(app).expose(app, include_in_schema=False)


@app.get("/health")
async def health() -> dict[str, bool]:
    return {"ok": True}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("labmonitor.main:app", host=settings.HOST, port=settings.PORT)
