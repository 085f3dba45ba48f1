import uvicorn
from dotenv import load_dotenv

load_dotenv()

from golden_store.core.config import settings  # noqa: E402

if __name__ == "__main__":
    uvicorn.run("golden_store.main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)
