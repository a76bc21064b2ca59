import json
import os
import logging
from flask import Flask
from drama_api.repo import JsonFileRepo
from drama_api.service import DramaService
from drama_api.web import register_routes, register_error_handlers

# Shared secret for write routes. NOT production safe: set API_KEY in the environment.
DEFAULT_API_KEY = "supersecretkey"

DEFAULT_CFG = {
    "data_file": "data/data.json",
    "debug": False,
    "host": "127.0.0.1",
    "port": 3001,
    "api_key": DEFAULT_API_KEY,
    "cors_origin": "*",
    "logging_level": "INFO",
    "max_content_length": 2 * 1024 * 1024,
}

# env var -> (config key, converter)
ENV_OVERRIDES = {
    "DATA_FILE": ("data_file", str),
    "DEBUG": ("debug", lambda v: v.lower() in ("1", "true", "yes", "on")),
    "HOST": ("host", str),
    "PORT": ("port", int),
    "API_KEY": ("api_key", str),
    "CORS_ORIGIN": ("cors_origin", str),
    "LOG_LEVEL": ("logging_level", str),
}

def load_config(path="config.json", environ=None):
    """Defaults, then config.json (if present), then environment variables."""
    environ = os.environ if environ is None else environ
    merged = DEFAULT_CFG.copy()
    if os.path.exists(path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                merged.update(json.load(f))
        except (OSError, ValueError) as e:
            print("Failed to read", path, ":", e, "- using defaults")
    for var, (key, convert) in ENV_OVERRIDES.items():
        raw = environ.get(var)
        if raw:
            try:
                merged[key] = convert(raw)
            except ValueError:
                print(f"Ignoring invalid {var}={raw!r}")
    return merged

def configure_logging(level_name: str, debug: bool = False):
    level = getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # quieter werkzeug when not debugging
    logging.getLogger("werkzeug").setLevel(logging.INFO if debug else logging.WARNING)

def create_app(config=None, repo=None):
    """
    Build the Flask app. `config` defaults to load_config(); `repo` defaults to
    a JsonFileRepo on config["data_file"]. The store is created here once and
    handed to the service.
    """
    cfg = DEFAULT_CFG.copy()
    cfg.update(load_config() if config is None else config)
    configure_logging(cfg["logging_level"], cfg["debug"])
    logger = logging.getLogger(__name__)
    logger.info("Starting app with config: %s", {k: v for k, v in cfg.items() if k != "api_key"})
    if cfg["api_key"] == DEFAULT_API_KEY:
        logger.warning("API_KEY is the built-in default; set API_KEY before exposing this service")

    app = Flask(__name__)
    app.config["API_KEY"] = cfg["api_key"]
    app.config["CORS_ORIGIN"] = cfg["cors_origin"]
    app.config["MAX_CONTENT_LENGTH"] = cfg["max_content_length"]
    app.json.sort_keys = False
    app.json.ensure_ascii = False

    if repo is None:
        repo = JsonFileRepo(cfg["data_file"])
    service = DramaService(repo)
    app.config["SERVICE"] = service

    register_routes(app, service)
    register_error_handlers(app)
    return app

if __name__ == "__main__":
    cfg = load_config()
    app = create_app(cfg)
    app.run(host=cfg["host"], port=cfg["port"], debug=cfg["debug"])
