from pydantic_settings import BaseSettings

DEFAULT_API_URL = "https://api.asage.io"


class ServiceConfig(BaseSettings):
    # ASage
    api_key: str = ""
    api_url: str = DEFAULT_API_URL
    default_model: str = "gpt-4o"

    # Token limits. 0 means "use the provider's placeholder".
    input_token_limit: int = 0
    output_token_limit: int = 0

    class Config:
        env_file = ".env"
        env_prefix = "ASAGE_"
