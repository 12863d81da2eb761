from pathlib import Path
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    data_path: Path = Path.home() / "JobAdverts"
    # Scales every advert time window. Staging runs use a small value so
    # adverts expire in minutes rather than weeks.
    time_multiplier: float = 1.0
    site_name: str = "Job Adverts"
    default_url_host: str = "http://localhost:8000"
    bitly_api_url: str = "https://api-ssl.bitly.com/v4/shorten"
    bitly_access_token: str = ""
    short_link_timeout: float = 5.0
    api_prefix: str = "/api/v1"
    host: str = "127.0.0.1"
    port: int = 8000

    @property
    def db_path(self) -> Path:
        return self.data_path / "adverts.sqlite"

    model_config = {"env_prefix": "ADVERTS_"}


settings = Settings()
