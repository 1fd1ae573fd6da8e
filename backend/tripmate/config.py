from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    env: str = "dev"
    database_url: str = "sqlite:///./data/tripmate.db"

    # Header the auth proxy uses to forward the verified user id
    user_id_header: str = "X-User-Id"

    scheduler_enabled: bool = True
    trip_expiry_interval_hours: int = 6

    nominatim_url: str = "https://nominatim.openstreetmap.org"
    osrm_url: str = "https://router.project-osrm.org"
    http_user_agent: str = "TravelCompanionApp/1.0"
    http_timeout_seconds: float = 10.0
    route_alternatives: int = 3

    # Matching: the radius moves the geometric thresholds, the score bar stays fixed
    default_match_radius_km: int = 10
    min_match_radius_km: int = 1
    max_match_radius_km: int = 100
    min_match_score: int = 50

    fuel_price_per_liter: float = 1.5
    fallback_detour_factor: float = 1.3
    fallback_speed_kmh: float = 60.0

    twilio_account_sid: Optional[str] = None
    twilio_auth_token: Optional[str] = None
    twilio_sms_number: Optional[str] = None
    twilio_whatsapp_number: Optional[str] = None
    twilio_api_url: str = "https://api.twilio.com/2010-04-01"

    def model_post_init(self, __context):
        if self.env == "prod" and self.database_url.startswith("sqlite"):
            raise ValueError(
                "Production requires explicit DATABASE_URL (not SQLite)"
            )

    class Config:
        env_file = ".env"


@lru_cache
def get_settings() -> Settings:
    return Settings()
