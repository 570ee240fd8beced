from fastapi import FastAPI
from capacity_engine.api.routes.capacity import router as capacity_router

app = FastAPI(title="Capacity Engine API")

@app.get("/health")
def health():
    return {"status": "ok"}

app.include_router(capacity_router)
