from fastapi import FastAPI

from nodepatch.api.routes.health import router as health_router
from nodepatch.api.routes.patches import router as patches_router
from nodepatch.api.routes.resolve import router as resolve_router
from nodepatch.utils.logging import configure_logging

configure_logging()

app = FastAPI(title="Node Patch Resolver", version="0.1.0")

app.include_router(health_router)
app.include_router(patches_router)
app.include_router(resolve_router)
