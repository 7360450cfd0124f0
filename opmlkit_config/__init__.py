from .env import EnvConfig, load_env_config

CONFIG = load_env_config()
