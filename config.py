# permmap - configuration
from pathlib import Path
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    schema_path: Path = Path("./permissions.schema.json")
    output_dir: Path = Path("./generated")
    typescript_filename: str = "permissions.ts"
    json_filename: str = "permissions.json"
    audit_log_path: Path | None = None
    audit_memory_limit: int = 1000
    log_level: str = "INFO"

    class Config:
        env_prefix = "PERMMAP_"
        env_file = ".env"
        extra = "ignore"


def get_settings() -> Settings:
    return Settings()
