# src/yieldstake/api/__main__.py
from __future__ import annotations

import uvicorn

from yieldstake.env import load_dotenv_if_present


def main() -> None:
    # Load .env early so YIELDSTAKE_* vars exist before anything reads them.
    load_dotenv_if_present()

    # Import after dotenv load (prevents "config read before env" surprises)
    from yieldstake.api.app import create_app
    from yieldstake.runtime.staking_config import apply_staking_config_to_env, load_staking_config

    cfg = load_staking_config()
    apply_staking_config_to_env(cfg)

    uvicorn.run(create_app(), host=cfg.api_host, port=cfg.api_port, log_level=cfg.log_level.lower())


if __name__ == "__main__":
    main()
