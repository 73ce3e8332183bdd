import os

def _canon_prefix(val):
    """
    Normalize API prefix to always be exactly like '/api':
      - defaults to '/api' when unset/empty
      - ensures a single leading slash
      - removes any trailing slash (except for root)
    """
    val = (val or "/api").strip()
    if not val.startswith("/"):
        val = "/" + val
    if len(val) > 1 and val.endswith("/"):
        val = val[:-1]
    return val


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


API_PREFIX = _canon_prefix(os.getenv("API_PREFIX"))

# Rate limits on /auth endpoints; tests and local scripts switch them off.
DISABLE_AUTH_RATE_LIMITS = _env_flag("DISABLE_AUTH_RATE_LIMITS")

SEED_ADMIN_USERNAME = os.getenv("SEED_ADMIN_USERNAME") or "admin"
SEED_ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL") or "admin@tennisrank.com"
SEED_ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD")
