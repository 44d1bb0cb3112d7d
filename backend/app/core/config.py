from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central settings object.
    Production provides env vars; locally you can use backend/.env.
    """
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # API keys (catalog + reviews; deals and news are unauthenticated)
    RAWG_API_KEY: str = ""
    GAMESPOT_API_KEY: str = ""

    # Upstream base URLs
    RAWG_BASE_URL: str = "https://api.rawg.io/api"
    CHEAPSHARK_BASE_URL: str = "https://www.cheapshark.com/api/1.0"
    GAMESPOT_BASE_URL: str = "https://www.gamespot.com/api"
    STEAM_NEWS_BASE_URL: str = "https://api.steampowered.com/ISteamNews/GetNewsForApp/v2"

    # Pacing + caching per upstream (seconds)
    RAWG_MIN_INTERVAL_SECONDS: float = 0.0
    RAWG_CACHE_TTL_SECONDS: float = 600.0
    CHEAPSHARK_MIN_INTERVAL_SECONDS: float = 0.0
    CHEAPSHARK_CACHE_TTL_SECONDS: float = 300.0
    GAMESPOT_MIN_INTERVAL_SECONDS: float = 2.0
    GAMESPOT_CACHE_TTL_SECONDS: float = 600.0
    STEAM_NEWS_MIN_INTERVAL_SECONDS: float = 0.1
    STEAM_NEWS_CACHE_TTL_SECONDS: float = 300.0

    # Request behaviour
    HTTP_TIMEOUT_SECONDS: float = 20.0
    UPSTREAM_MAX_RETRIES: int = 2
    UPSTREAM_MAX_BACKOFF_SECONDS: float = 10.0
    USER_AGENT: str = "GameHub/1.0"

    # Deals
    DEALS_PAGE_SIZE: int = 60

    # News fan-out
    NEWS_FEED_IDS: List[int] = [
        730,      # Counter-Strike 2
        440,      # Team Fortress 2
        570,      # Dota 2
        1172470,  # Apex Legends
        271590,   # Grand Theft Auto V
        1085660,  # Destiny 2
        252490,   # Rust
        1938090,  # Call of Duty
        1245620,  # ELDEN RING
        1091500,  # Cyberpunk 2077
        413150,   # Stardew Valley
        892970,   # Valheim
        1086940,  # Baldur's Gate 3
        1203220,  # NARAKA: BLADEPOINT
        1517290,  # Battlefield 2042
        1174180,  # Red Dead Redemption 2
        1237970,  # Titanfall 2
        1599340,  # Overwatch 2
        1222670,  # Generation Zero
        1449850,  # Yu-Gi-Oh! Master Duel
        1426210,  # It Takes Two
        1240440,  # Halo Infinite
        1328670,  # Mass Effect Legendary Edition
        1313860,  # EA SPORTS FIFA 23
        1517950,  # Battlefield 1
        1174370,  # Mortal Kombat 11
        1145360,  # Hades
        1097150,  # Fall Guys
        1203630,  # Inscryption
        1449560,  # Vampire Survivors
        1623730,  # Palworld
        1966720,  # Lethal Company
        1817070,  # Marvel's Spider-Man Remastered
        1888930,  # Marvel's Spider-Man: Miles Morales
        1811260,  # Warhammer 40,000: Darktide
        1172620,  # Sea of Thieves
    ]
    NEWS_BATCH_SIZE: int = 5
    NEWS_BATCH_DELAY_SECONDS: float = 0.1
    NEWS_ITEMS_PER_FEED: int = 15

    # Service
    LOG_LEVEL: str = "INFO"
    CORS_ALLOW_ORIGINS: List[str] = ["*"]

    # Versioning
    APP_VERSION: str = "0.1.0"
    BUILD_ID: str = "dev"


# ✅ MUST EXIST: other modules import this
settings = Settings()
