from contextlib import asynccontextmanager
from fastapi import FastAPI
from sshlink.api.routes import router
from sshlink.api.accounts import router as accounts_router
from sshlink.core.database import engine
from sshlink.models.username_sequence import create_tables


@asynccontextmanager
async def lifespan(app: FastAPI):
	"""Create database tables on startup."""
	create_tables(engine)
	print(f"Database tables ready at `{engine.url}`")
	yield

app = FastAPI(title="SSH Link Service", lifespan=lifespan)
app.include_router(router)
app.include_router(accounts_router)
if __name__ == "__main__":
	import uvicorn
	uvicorn.run("sshlink.main:app", host="0.0.0.0", port=8000, reload=True)
