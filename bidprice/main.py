from fastapi import FastAPI
from bidprice.api.routes import router as api_router
from bidprice.db import Base, engine
import bidprice.models  # noqa: F401 ensure models are imported so tables are known
from bidprice.utils import logger

# create FastAPI instance
app = FastAPI(title="Carsome Bid Price Manager")
app.include_router(api_router)


@app.on_event("startup")
def on_startup_create_tables():
    # Ensure database tables are created on startup
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ready")
