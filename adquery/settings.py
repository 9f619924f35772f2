from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings

from .ad.models import ADConfig


class Settings(BaseSettings):
    # AD
    ad_domain: str = Field(..., alias="AD_DOMAIN")
    ad_dc: str = Field("", alias="AD_DC")  # пусто = сам домен
    ad_port: int = Field(636, alias="AD_PORT")
    ad_use_ssl: bool = Field(True, alias="AD_USE_SSL")
    ad_starttls: bool = Field(False, alias="AD_STARTTLS")
    ad_bind_username: str = Field("", alias="AD_BIND_USERNAME")
    ad_bind_password: str = Field("", alias="AD_BIND_PASSWORD")
    ad_page_size: int = Field(1000, alias="AD_PAGE_SIZE")
    ad_connect_timeout: float = Field(10.0, alias="AD_CONNECT_TIMEOUT")

    # AD TLS validation (опционально)
    ad_tls_validate: bool = Field(False, alias="AD_TLS_VALIDATE")
    ad_ca_cert_file: str = Field("", alias="AD_CA_CERT_FILE")

    # Logging / display
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_dir: str = Field("", alias="LOG_DIR")
    log_retention_days: int = Field(30, alias="LOG_RETENTION_DAYS")
    tz: str = Field("UTC", alias="TZ")

    class Config:
        populate_by_name = True

    def ad_config(self) -> ADConfig:
        return ADConfig(
            dc_short=self.ad_dc,
            domain=self.ad_domain,
            port=self.ad_port,
            use_ssl=self.ad_use_ssl,
            starttls=self.ad_starttls,
            bind_username=self.ad_bind_username,
            bind_password=self.ad_bind_password,
            tls_validate=self.ad_tls_validate,
            ca_cert_file=self.ad_ca_cert_file,
            page_size=self.ad_page_size,
            connect_timeout=self.ad_connect_timeout,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
