from pydantic_settings import BaseSettings
from dotenv import load_dotenv
from pathlib import Path
import os


load_dotenv()


class Settings(BaseSettings):
    app_name: str = "Waste Collection Tracking API"
    debug: bool = False
    database_url: str = "sqlite:///./waste_collection.db"
    host: str = "127.0.0.1"
    port: int = 8000
    secret_key: str = ""
    access_token_expire_minutes: int = 15
    refresh_token_expire_minutes: int = 60 * 60 * 24 * 7
    allowed_hosts: str = ""
    static_dir: Path = Path(__file__).parent.parent.parent / "static"
    log_file: str = "logs/application.log"
    public_url: str = "http://localhost:8000"

    # Public link given to clients, the tracking token is appended.
    tracking_base_url: str = "http://localhost:5173/tracking"

    # Privileged account operations
    service_role_key: str = ""
    initial_admin_email: str = "admin@example.com"
    initial_admin_password: str = ""
    initial_admin_name: str = "Administrator"

    # Report header
    company_name: str = "Waste Collection"
    company_address: str = ""
    report_page_size: int = 30


settings = Settings()

if not settings.secret_key:
    raise RuntimeError("Secret key not configured.")


os.makedirs(settings.static_dir, exist_ok=True)
