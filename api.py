import uvicorn
from config import ApplicationConfig
from family_auth.api.app import create_app

app = create_app(ApplicationConfig)

if __name__ == "__main__":
    uvicorn.run(
        "api:app",
        host=ApplicationConfig.API_HOST,
        port=ApplicationConfig.API_PORT,
        reload=ApplicationConfig.ENVIRONMENT == "dev",
        log_level=ApplicationConfig.LOG_LEVEL.lower(),
    )
