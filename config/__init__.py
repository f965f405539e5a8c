import os

_ENV_MODULES = {
    "prod": "config.production",
    "production": "config.production",
    "test": "config.testing",
    "testing": "config.testing",
}


def get_settings_module() -> str:
    """Settings module for the current process.

    TIMECLOCK_SETTINGS names a module directly; otherwise APP_ENV picks one of
    the bundled modules and anything unknown means development.
    """
    explicit = os.getenv("TIMECLOCK_SETTINGS")
    if explicit:
        return explicit
    env = os.getenv("APP_ENV", "development").strip().lower()
    return _ENV_MODULES.get(env, "config.development")
