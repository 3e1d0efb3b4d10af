from quizmaster.config import Settings
from quizmaster.logging_config import configure_logging
from quizmaster.presentation.app import create_app

settings = Settings.from_env()

# Configure logging
logger = configure_logging(settings)

# Initialize FastAPI app
app = create_app(settings)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
