import os
import uvicorn
from dotenv import load_dotenv

def main():
    """
    Runs the knowledge graph API.
    """
    load_dotenv()
    uvicorn.run(
        "api.main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
    )


if __name__ == '__main__':
    main()
