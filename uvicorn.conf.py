from app.core.config import get_settings

settings = get_settings()

host = settings.BACKEND_HOST
port = settings.BACKEND_PORT
log_level = "debug" if settings.DEBUG else "info"
# the memory backing lives inside one process
workers = 1 if settings.DEBUG or settings.STORAGE_BACKEND == "memory" else 2
