import os
from dotenv import load_dotenv

from models.config import Config
from utils.dates import utcnow

load_dotenv()

MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017/storefront")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
CURRENCY_SYMBOL = os.getenv("CURRENCY_SYMBOL", "₹")
DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", "10"))
MAX_PAGE_SIZE = int(os.getenv("MAX_PAGE_SIZE", "100"))

_TRUTHY = {"1", "true", "yes", "on"}


def get_config(key: str, default=None):
    cfg = Config.objects(key=key).first()
    return cfg.value if cfg else default


def set_config(key: str, value: str):
    cfg = Config.objects(key=key).first()
    if cfg:
        cfg.update(value=value, updated_at=utcnow())
    else:
        Config(key=key, value=value).save()


def currency_symbol() -> str:
    return get_config("currency_symbol", CURRENCY_SYMBOL)


def enforce_usage_limit() -> bool:
    """
    Whether the usage counter refuses to go past usage_limit on order commit.
    A runtime override in the config collection wins over the environment.
    """
    raw = get_config("promo_enforce_usage_limit")
    if raw is None:
        raw = os.getenv("PROMO_ENFORCE_USAGE_LIMIT", "true")
    return str(raw).strip().lower() in _TRUTHY
