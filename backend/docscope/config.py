from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # MongoDB
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db: str = "docscope"

    # Backend
    backend_host: str = "0.0.0.0"
    backend_port: int = 8000
    backend_cors_origins: str = "http://localhost:3000"
    log_level: str = "INFO"

    # Analytics
    created_at_field: str = "createdAt"
    field_sample_size: int = 500
    pattern_sample_size: int = 200
    relationship_sample_size: int = 20
    max_sample_size: int = 1000
    hierarchy_max_depth: int = 2
    hierarchy_sample_size: int = 3
    trend_days: int = 30
    trend_collections_limit: int = 5

    # Document browsing
    default_page_size: int = 25
    max_page_size: int = 100
    recent_documents_limit: int = 10

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.backend_cors_origins.split(",") if o.strip()]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
