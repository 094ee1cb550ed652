import logging
from fastapi import FastAPI
from split_ledger.config import settings
from split_ledger.db.database import Base, engine
from split_ledger.models import groups, expenses, settlements  # noqa: F401  register tables
from split_ledger.api.v1.routes.groups import router as groups_router
from split_ledger.api.v1.routes.expenses import router as expenses_router
from split_ledger.api.v1.routes.settlements import router as settlements_router

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)

Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Split Ledger - Shared Expenses",
    description="Tracks group expenses and settlements and suggests the fewest payments to settle up",
    version="1.0.0"
)

app.include_router(groups_router)
app.include_router(expenses_router)
app.include_router(settlements_router)


@app.get("/")
def read_root():
    return {"message": "Split Ledger API", "version": "1.0.0"}


@app.get("/health")
def health_check():
    return {"status": "healthy"}
