import logging
import secrets

from flask import Blueprint, jsonify, url_for
from flask_jwt_extended import jwt_required

from .errors import error_response
from .models import Sensor, Series, db
from .validation import bool_field, int_field, json_body, string_field

logger = logging.getLogger(__name__)

sensors_bp = Blueprint("sensors", __name__, url_prefix="/api/sensors")

CREATED_MESSAGE = "Sensor has been created. Save the API Key, it cannot be retrieved later!"
REGENERATED_MESSAGE = "A new API Key has been generated. Save it, it cannot be retrieved later!"


def generate_api_key():
    return secrets.token_urlsafe(32)


# every sensor route needs a logged-in user
@sensors_bp.before_request
@jwt_required()
def require_login():
    pass


def _get_sensor(sensor_id):
    return db.session.get(Sensor, sensor_id)


@sensors_bp.route("", methods=["GET"])
def list_sensors():
    return jsonify([s.to_dict() for s in Sensor.query.order_by(Sensor.id).all()])


@sensors_bp.route("/<int:sensor_id>", methods=["GET"])
def get_sensor(sensor_id):
    sensor = _get_sensor(sensor_id)
    if sensor is None:
        return error_response("Sensor not found", 404)
    return jsonify(sensor.to_dict())


@sensors_bp.route("", methods=["POST"])
def create_sensor():
    data = json_body()
    name = string_field(data, "name", min_length=3, max_length=200)
    series_id = int_field(data, "seriesId")
    description = string_field(data, "description", required=False, max_length=500)

    if db.session.get(Series, series_id) is None:
        return error_response("Series not found", 400)

    sensor = Sensor(name=name, api_key=generate_api_key(), series_id=series_id,
                    description=description, is_active=True)
    db.session.add(sensor)
    db.session.commit()
    logger.info("Created sensor %s (%s) for series %s", sensor.id, sensor.name, series_id)

    location = url_for("sensors.get_sensor", sensor_id=sensor.id)
    return jsonify(sensor.to_created_dict(CREATED_MESSAGE)), 201, {"Location": location}


@sensors_bp.route("/<int:sensor_id>", methods=["PUT"])
def update_sensor(sensor_id):
    sensor = _get_sensor(sensor_id)
    if sensor is None:
        return error_response("Sensor not found", 404)

    data = json_body()
    sensor.name = string_field(data, "name", min_length=3, max_length=200)
    sensor.description = string_field(data, "description", required=False, max_length=500)
    sensor.is_active = bool_field(data, "isActive")
    db.session.commit()
    return "", 204


@sensors_bp.route("/<int:sensor_id>/regenerate-key", methods=["POST"])
def regenerate_key(sensor_id):
    sensor = _get_sensor(sensor_id)
    if sensor is None:
        return error_response("Sensor not found", 404)

    sensor.api_key = generate_api_key()
    db.session.commit()
    logger.info("Regenerated API key for sensor %s", sensor.id)
    return jsonify(sensor.to_created_dict(REGENERATED_MESSAGE))


@sensors_bp.route("/<int:sensor_id>", methods=["DELETE"])
def delete_sensor(sensor_id):
    sensor = _get_sensor(sensor_id)
    if sensor is None:
        return error_response("Sensor not found", 404)

    db.session.delete(sensor)
    db.session.commit()
    logger.info("Deleted sensor %s", sensor_id)
    return "", 204


@sensors_bp.route("/<int:sensor_id>/stats", methods=["GET"])
def sensor_stats(sensor_id):
    sensor = _get_sensor(sensor_id)
    if sensor is None:
        return error_response("Sensor not found", 404)
    return jsonify(sensor.stats())
