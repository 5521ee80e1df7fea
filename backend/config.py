from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./bookings.db"
    STORAGE_KEY: str = "geeta_university_bookings"
    UNIVERSITY_NAME: str = "Geeta University"
    LOG_LEVEL: str = "INFO"

    # booking confirmation mail, off unless all three are set
    MAIL_USERNAME: Optional[str] = None
    MAIL_PASSWORD: Optional[str] = None
    MAIL_FROM: Optional[str] = None
    MAIL_SERVER: str = "smtp.gmail.com"
    MAIL_PORT: int = 587

    # WhatsApp alert to the approver, off unless configured
    TWILIO_SID: Optional[str] = None
    TWILIO_AUTH_TOKEN: Optional[str] = None
    TWILIO_WHATSAPP_FROM: Optional[str] = None
    APPROVER_WHATSAPP_TO: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="allow"
    )

    @property
    def mail_enabled(self) -> bool:
        return bool(self.MAIL_USERNAME and self.MAIL_PASSWORD and self.MAIL_FROM)

    @property
    def whatsapp_enabled(self) -> bool:
        return bool(
            self.TWILIO_SID
            and self.TWILIO_AUTH_TOKEN
            and self.TWILIO_WHATSAPP_FROM
            and self.APPROVER_WHATSAPP_TO
        )


settings = Settings()
