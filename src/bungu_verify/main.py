# configure logging before the rest of the app imports libraries that may log
from .logging_config import get_logger

logger = get_logger(__name__)

from . import composition  # noqa: E402
from .wiring import create_app  # noqa: E402

app = create_app()


@app.on_event("startup")
async def on_startup():
    # runtime clients and the sweep task; tests that only call create_app() skip this
    app.state.wiring = await composition.wire_app(app)


@app.on_event("shutdown")
async def on_shutdown():
    wiring = getattr(app.state, "wiring", None)
    if wiring is not None:
        await wiring.teardown()
    logger.info("shutdown complete")


if __name__ == "__main__":
    import uvicorn

    s = app.state.settings
    uvicorn.run("bungu_verify.main:app", host=s.server_host, port=s.server_port, reload=True)
