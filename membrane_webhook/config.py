from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    service_name: str = "membrane-webhook"
    log_level: str = "INFO"

    # unset means every request is accepted, see auth.signature
    WEBHOOK_SECRET: str | None = None

    membrane_api_uri: str = "https://api.integration.app"
    membrane_workspace_key: str = ""
    membrane_workspace_secret: str = ""
    membrane_token_expires_seconds: int = 7200
    membrane_token_refresh_margin_seconds: int = 300
    membrane_request_timeout_seconds: float = 10.0

    # customer the workspace token is issued for
    customer_id: str = ""
    customer_name: str = ""

    # empty connection id falls back to discovery by integration key
    gmail_connection_id: str = ""
    email_integration_key: str = "gmail"
    email_action_key: str = "send-email"

settings = Settings()
