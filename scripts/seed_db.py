from __future__ import annotations

import importlib

from dotenv import load_dotenv

from gym_dashboard.config import get_settings_module
from gym_dashboard.database.bootstrap import DEMO_USERNAME, ensure_demo_owner, seed_demo_members


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    owner_id = ensure_demo_owner(db_config)
    inserted = seed_demo_members(db_config, owner_id)

    print(
        "OK: Seeded database -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')} "
        f"(owner={DEMO_USERNAME}, new members={inserted})"
    )


if __name__ == "__main__":
    main()
