import logging

from flask import Blueprint, jsonify, url_for
from flask_jwt_extended import jwt_required

from .errors import error_response
from .models import Series, db
from .validation import bool_field, json_body, series_payload

logger = logging.getLogger(__name__)

series_bp = Blueprint("series", __name__, url_prefix="/api/series")


@series_bp.route("", methods=["GET"])
def list_series():
    return jsonify([s.to_dict() for s in Series.query.order_by(Series.id).all()])


@series_bp.route("/<int:series_id>", methods=["GET"])
def get_series(series_id):
    series = db.session.get(Series, series_id)
    if series is None:
        return error_response("Series not found", 404)
    return jsonify(series.to_dict())


@series_bp.route("", methods=["POST"])
@jwt_required()
def create_series():
    series = Series(**series_payload(json_body()))
    db.session.add(series)
    db.session.commit()

    location = url_for("series.get_series", series_id=series.id)
    return jsonify(series.to_dict()), 201, {"Location": location}


@series_bp.route("/<int:series_id>", methods=["PUT"])
@jwt_required()
def update_series(series_id):
    series = db.session.get(Series, series_id)
    if series is None:
        return error_response("Series not found", 404)

    data = json_body()
    for field, value in series_payload(data).items():
        setattr(series, field, value)
    series.is_active = bool_field(data, "isActive")
    db.session.commit()
    return "", 204


@series_bp.route("/<int:series_id>", methods=["DELETE"])
@jwt_required()
def delete_series(series_id):
    series = db.session.get(Series, series_id)
    if series is None:
        return error_response("Series not found", 404)

    if series.measurement_count():
        logger.info("Refusing to delete series %s: it still has measurements", series_id)
        return error_response("Cannot delete a series that contains measurements", 400)

    db.session.delete(series)
    db.session.commit()
    return "", 204
