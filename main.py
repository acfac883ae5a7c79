from fastapi import FastAPI
from shared.config.database import create_tables

# Importing the sub-apps registers every model with Base
from services.product_service.main import product_app
from services.order_service.main import order_app
from services.auth_service.main import auth_app

app = FastAPI(title="Retail Back-Office")

# Mounted apps do not receive lifespan events, so tables are created here
@app.on_event("startup")
async def startup_event():
    await create_tables()

@app.get("/health")
async def health_check():
    return {"service": "retail-backoffice", "status": "running"}

app.mount("/products", product_app)
app.mount("/orders", order_app)
app.mount("/auth", auth_app)
