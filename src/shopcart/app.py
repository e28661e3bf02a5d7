import logging
from datetime import datetime, timezone
from typing import Optional

from flask import Flask, jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from shopcart.core.config import Config
from shopcart.core.dependencies import CartContext
from shopcart.core.exceptions import BaseAPIException
from shopcart.routes import cart_bp, products_bp
from shopcart.routes.utils import EXTENSION_KEY

logger = logging.getLogger(__name__)


def _error_body(code: str, message: str, details: Optional[dict] = None) -> dict:
    return {
        "success": False,
        "error": {"code": code, "message": message, "details": details or {}},
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def create_app(context: Optional[CartContext] = None, config: Optional[Config] = None) -> Flask:
    """
    Application factory.

    Pass a ready CartContext (tests use in-memory repositories); otherwise
    one is built from the environment against the configured database.
    """
    if context is None:
        config = config or Config.from_env()
        config.validate()
        context = CartContext.from_config(config)

    logging.basicConfig(
        level=context.config.app.log_level,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )

    app = Flask(__name__)
    app.extensions[EXTENSION_KEY] = context

    app.register_blueprint(products_bp, url_prefix="/api/products")
    app.register_blueprint(cart_bp,     url_prefix="/api/cart")

    # ------------------------------------------------------------------ #
    # Error handlers: consistent JSON error envelope                      #
    # ------------------------------------------------------------------ #
    @app.errorhandler(BaseAPIException)
    def api_error(e: BaseAPIException):
        if e.status_code >= 500:
            logger.error(f"{e.error_code}: {e.internal_message}")
        body = e.to_dict()
        body["timestamp"] = datetime.now(timezone.utc).isoformat()
        return jsonify(body), e.status_code

    @app.errorhandler(HTTPException)
    def http_error(e: HTTPException):
        code = (e.name or "error").upper().replace(" ", "_")
        return jsonify(_error_body(code, str(e.description))), e.code

    @app.errorhandler(SQLAlchemyError)
    def db_error(e):
        logger.error(f"Database error: {e}")
        return jsonify(_error_body("DATABASE_ERROR", "A database error occurred.")), 500

    return app


if __name__ == "__main__":
    application = create_app()
    app_config = application.extensions[EXTENSION_KEY].config.app
    application.run(debug=app_config.debug, host=app_config.host, port=app_config.port)
