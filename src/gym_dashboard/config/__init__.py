import os


def get_settings_module() -> str:
    # Environment comes from APP_ENV, 'development' by default
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "gym_dashboard.config.production"

    if env in {"test", "testing"}:
        return "gym_dashboard.config.testing"

    return "gym_dashboard.config.development"
