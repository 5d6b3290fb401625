from flask import Flask

from .config import Config
from .controllers.account import bp as account_bp
from .controllers.errors import bp as errors_bp
from .controllers.miners import bp as miners_bp
from .controllers.rentals import bp as rentals_bp
from .models.store import Store
from .models.tier import TierCatalog
from .services.rental_service import RentalService
from .utils.clock import SystemClock


def create_app(config=None, *, store=None, catalog=None, clock=None):
    """
    Build the JSON app. `config` overrides values from Config; store, catalog
    and clock may be injected (tests pass an in-memory store and a frozen clock).
    """
    app = Flask(__name__)
    app.config.from_object(Config)
    if config:
        app.config.update(config)
    app.logger.setLevel(app.config["LOG_LEVEL"])

    if store is None:
        store = Store.instance(app.config.get("DATA_PATH") or None)

    app.extensions["minerent"] = RentalService(
        store=store,
        catalog=catalog or TierCatalog.default(),
        clock=clock or SystemClock(),
        max_retries=app.config["CLAIM_MAX_RETRIES"],
    )

    app.register_blueprint(errors_bp)
    app.register_blueprint(account_bp)
    app.register_blueprint(miners_bp)
    app.register_blueprint(rentals_bp)

    return app
