import logging

from flask import Blueprint, jsonify, request, url_for
from flask_jwt_extended import jwt_required
from sqlalchemy import func

from .auth import current_user_id
from .errors import error_response
from .models import Measurement, Sensor, Series, db, isoformat, utcnow
from .validation import (int_field, json_body, measurement_query, number_field,
                         string_field, timestamp_field)

logger = logging.getLogger(__name__)

measurements_bp = Blueprint("measurements", __name__, url_prefix="/api/measurements")

API_KEY_HEADER = "X-API-Key"


def filtered_query(filters):
    query = Measurement.query
    if filters["start"] is not None:
        query = query.filter(Measurement.timestamp >= filters["start"])
    if filters["end"] is not None:
        query = query.filter(Measurement.timestamp <= filters["end"])
    if filters["series_ids"]:
        query = query.filter(Measurement.series_id.in_(filters["series_ids"]))
    return query


def _created(measurement):
    location = url_for("measurements.get_measurement", measurement_id=measurement.id)
    return jsonify(measurement.to_dict()), 201, {"Location": location}


@measurements_bp.route("", methods=["GET"])
def list_measurements():
    filters = measurement_query(request.args)
    order = Measurement.timestamp.desc() if filters["descending"] else Measurement.timestamp.asc()
    query = filtered_query(filters).order_by(order, Measurement.id)
    if filters["limit"]:
        query = query.limit(filters["limit"])
    return jsonify([m.to_dict() for m in query.all()])


@measurements_bp.route("/stats", methods=["GET"])
def measurement_stats():
    filters = measurement_query(request.args)
    subset = filtered_query(filters).subquery()
    rows = (db.session.query(
                Series.id,
                Series.name,
                func.count(subset.c.id),
                func.min(subset.c.value),
                func.max(subset.c.value),
                func.avg(subset.c.value),
                func.min(subset.c.timestamp),
                func.max(subset.c.timestamp))
            .join(subset, subset.c.series_id == Series.id)
            .group_by(Series.id, Series.name)
            .order_by(Series.id)
            .all())

    return jsonify([{
        "seriesId": series_id,
        "seriesName": name,
        "count": count,
        "minValue": low,
        "maxValue": high,
        "avgValue": avg,
        "firstMeasurement": isoformat(first),
        "lastMeasurement": isoformat(last),
    } for series_id, name, count, low, high, avg, first, last in rows])


@measurements_bp.route("/<int:measurement_id>", methods=["GET"])
def get_measurement(measurement_id):
    measurement = db.session.get(Measurement, measurement_id)
    if measurement is None:
        return error_response("Measurement not found", 404)
    return jsonify(measurement.to_dict())


@measurements_bp.route("", methods=["POST"])
@jwt_required()
def create_measurement():
    data = json_body()
    value = number_field(data, "value", label="Value")
    timestamp = timestamp_field(data)
    series_id = int_field(data, "seriesId", label="SeriesId")
    notes = string_field(data, "notes", required=False, max_length=500, label="Notes")

    series = db.session.get(Series, series_id)
    if series is None:
        return error_response("Series not found", 400)
    if not series.accepts(value):
        return error_response(series.range_message(value), 400)

    measurement = Measurement(value=value, timestamp=timestamp, series_id=series.id,
                              user_id=current_user_id(), notes=notes)
    db.session.add(measurement)
    db.session.commit()
    return _created(measurement)


@measurements_bp.route("/<int:measurement_id>", methods=["PUT"])
@jwt_required()
def update_measurement(measurement_id):
    measurement = db.session.get(Measurement, measurement_id)
    if measurement is None:
        return error_response("Measurement not found", 404)

    data = json_body()
    value = number_field(data, "value", label="Value")
    timestamp = timestamp_field(data)
    notes = string_field(data, "notes", required=False, max_length=500, label="Notes")

    if not measurement.series.accepts(value):
        return error_response(measurement.series.range_message(value), 400)

    measurement.value = value
    measurement.timestamp = timestamp
    measurement.notes = notes
    db.session.commit()
    return "", 204


@measurements_bp.route("/<int:measurement_id>", methods=["DELETE"])
@jwt_required()
def delete_measurement(measurement_id):
    measurement = db.session.get(Measurement, measurement_id)
    if measurement is None:
        return error_response("Measurement not found", 404)

    db.session.delete(measurement)
    db.session.commit()
    return "", 204


# --- Sensor ingestion -----------------------------------------------

@measurements_bp.route("/sensor", methods=["POST"])
def create_from_sensor():
    api_key = request.headers.get(API_KEY_HEADER)
    if not api_key:
        return error_response("API Key is required", 401)

    sensor = Sensor.query.filter_by(api_key=api_key, is_active=True).first()
    if sensor is None:
        logger.warning("Rejected sensor reading from %s: invalid or inactive API key",
                       request.remote_addr)
        return error_response("Invalid or inactive API Key", 401)

    data = json_body()
    value = number_field(data, "value", label="Value")
    timestamp = timestamp_field(data, required=False)
    notes = string_field(data, "notes", required=False, max_length=500, label="Notes")

    if not sensor.series.accepts(value):
        logger.info("Sensor %s sent out-of-range value %s", sensor.id, value)
        return error_response(sensor.series.range_message(value, prefix="Value"), 400)

    now = utcnow()
    measurement = Measurement(value=value, timestamp=timestamp or now,
                              series_id=sensor.series_id, sensor_id=sensor.id, notes=notes)
    db.session.add(measurement)
    sensor.last_data_received = now
    db.session.commit()
    return _created(measurement)
