from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.graph_router import router as graph_router

app = FastAPI(
    title="Ocean Knowledge Graph API",
    description="Builds a knowledge graph from environmental measurements and streams its force-directed layout.",
    version="1.0.0"
)

origins = [
    "http://localhost",
    "http://localhost:3000",
    "http://localhost:5173",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(graph_router)

@app.get("/")
def read_root():
    return {"message": "Ocean Knowledge Graph API is running."}
