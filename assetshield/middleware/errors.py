"""
Error handlers shared by every blueprint.

Service exceptions (``assetshield.errors.AppError``) and database failures are
rendered as ``{"error": ...}`` JSON bodies; HTML pages never leak tracebacks.
"""
from flask import jsonify
from pydantic import ValidationError as PydanticValidationError
from marshmallow import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import IntegrityError, OperationalError, ProgrammingError
from werkzeug.exceptions import HTTPException

from assetshield.database import db
from assetshield.errors import AppError
from assetshield.infra.log import get_logger

logger = get_logger("assetshield.errors")


def register_error_handlers(app):

    @app.errorhandler(AppError)
    def handle_app_error(e: AppError):
        if e.status_code >= 500:
            logger.error(f"Application error: {e.message}", error_type=type(e).__name__)
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(PydanticValidationError)
    def handle_pydantic_error(e: PydanticValidationError):
        return create_validation_error_response(
            "Invalid request body",
            details=[
                {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
                for err in e.errors()
            ],
        )

    @app.errorhandler(MarshmallowValidationError)
    def handle_marshmallow_error(e: MarshmallowValidationError):
        return create_validation_error_response("Invalid request body", details=e.messages)

    @app.errorhandler(OperationalError)
    def handle_operational_error(e):
        db.session.rollback()
        error_msg = str(e.orig) if hasattr(e, "orig") else str(e)
        if "does not exist" in error_msg or "no such table" in error_msg:
            logger.error(f"Database table not found: {error_msg}")
            return jsonify({"error": "Database schema is not initialised"}), 503
        logger.error(f"Database operational error: {error_msg}")
        return jsonify({"error": "Database temporarily unavailable"}), 503

    @app.errorhandler(ProgrammingError)
    def handle_programming_error(e):
        db.session.rollback()
        error_msg = str(e.orig) if hasattr(e, "orig") else str(e)
        logger.error(f"Database programming error: {error_msg}")
        return jsonify({"error": "Database schema mismatch"}), 500

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(e):
        db.session.rollback()
        error_msg = str(e.orig) if hasattr(e, "orig") else str(e)
        logger.error(f"Database integrity error: {error_msg}")
        if "unique" in error_msg.lower() or "duplicate" in error_msg.lower():
            return jsonify({"error": "This entry already exists"}), 409
        return jsonify({"error": "Data integrity constraint violated"}), 400

    @app.errorhandler(HTTPException)
    def handle_http_exception(e: HTTPException):
        return jsonify({"error": e.description or e.name}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        db.session.rollback()
        logger.exception(f"Unhandled error: {e}", error_type=type(e).__name__)
        return jsonify({"error": "Internal server error"}), 500


def create_validation_error_response(message: str, field: str = None, details=None):
    response = {"error": message}
    if field:
        response["field"] = field
    if details is not None:
        response["details"] = details
    return jsonify(response), 400
