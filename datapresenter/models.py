from datetime import datetime, timezone

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import func

db = SQLAlchemy()


def utcnow():
    """Naive UTC timestamp; every datetime column stores UTC without tzinfo."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def isoformat(value):
    if value is None:
        return None
    return value.isoformat() + "Z"


def mask_api_key(api_key):
    if not api_key or len(api_key) < 8:
        return "****"
    return f"{api_key[:4]}...{api_key[-4:]}"


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(100), unique=True, nullable=False, index=True)
    email = db.Column(db.String(100), unique=True, nullable=False)
    password_hash = db.Column(db.String(128), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    last_login = db.Column(db.DateTime)
    measurements = db.relationship("Measurement", backref="user", lazy=True)

    def __repr__(self):
        return f"<User {self.username}>"


class Series(db.Model):
    __tablename__ = "series"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.String(500))
    min_value = db.Column(db.Float, nullable=False)
    max_value = db.Column(db.Float, nullable=False)
    unit = db.Column(db.String(50), nullable=False, default="")
    color = db.Column(db.String(7), nullable=False, default="#f8b4aa")
    icon = db.Column(db.String(50))
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    measurements = db.relationship("Measurement", backref="series", lazy=True)
    sensors = db.relationship("Sensor", backref="series", lazy=True,
                              cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Series {self.name}>"

    def accepts(self, value):
        return self.min_value <= value <= self.max_value

    def range_message(self, value, prefix="Measurement value"):
        return (f"{prefix} ({value}) is out of range for this series "
                f"({self.min_value} - {self.max_value} {self.unit})")

    def measurement_count(self):
        return Measurement.query.filter_by(series_id=self.id).count()

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "minValue": self.min_value,
            "maxValue": self.max_value,
            "unit": self.unit,
            "color": self.color,
            "icon": self.icon,
            "isActive": self.is_active,
            "measurementCount": self.measurement_count(),
            "createdAt": isoformat(self.created_at),
        }


class Sensor(db.Model):
    __tablename__ = "sensors"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    api_key = db.Column(db.String(100), unique=True, nullable=False, index=True)
    series_id = db.Column(db.Integer, db.ForeignKey("series.id", ondelete="CASCADE"),
                          nullable=False)
    description = db.Column(db.String(500))
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    last_data_received = db.Column(db.DateTime)
    # deleting a sensor keeps its measurements and clears their sensor_id
    measurements = db.relationship("Measurement", backref="sensor", lazy=True)

    def __repr__(self):
        return f"<Sensor {self.name}>"

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "apiKey": mask_api_key(self.api_key),
            "seriesId": self.series_id,
            "seriesName": self.series.name,
            "description": self.description,
            "isActive": self.is_active,
            "createdAt": isoformat(self.created_at),
            "lastDataReceived": isoformat(self.last_data_received),
            "measurementCount": Measurement.query.filter_by(sensor_id=self.id).count(),
        }

    def to_created_dict(self, message):
        return {
            "id": self.id,
            "name": self.name,
            "apiKey": self.api_key,
            "seriesId": self.series_id,
            "message": message,
        }

    def stats(self):
        count, first, last, avg, low, high = db.session.query(
            func.count(Measurement.id),
            func.min(Measurement.timestamp),
            func.max(Measurement.timestamp),
            func.avg(Measurement.value),
            func.min(Measurement.value),
            func.max(Measurement.value),
        ).filter(Measurement.sensor_id == self.id).one()

        return {
            "id": self.id,
            "name": self.name,
            "seriesId": self.series_id,
            "seriesName": self.series.name,
            "totalMeasurements": count,
            "firstMeasurement": isoformat(first),
            "lastMeasurement": isoformat(last),
            "averageValue": avg if count else 0,
            "minValue": low if count else 0,
            "maxValue": high if count else 0,
            "lastDataReceived": isoformat(self.last_data_received),
            "isActive": self.is_active,
        }


class Measurement(db.Model):
    __tablename__ = "measurements"

    id = db.Column(db.Integer, primary_key=True)
    value = db.Column(db.Float, nullable=False)
    timestamp = db.Column(db.DateTime, nullable=False, index=True)
    series_id = db.Column(db.Integer, db.ForeignKey("series.id", ondelete="RESTRICT"),
                          nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"))
    sensor_id = db.Column(db.Integer, db.ForeignKey("sensors.id", ondelete="SET NULL"))
    notes = db.Column(db.String(500))
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def __repr__(self):
        return f"<Measurement series={self.series_id} value={self.value}>"

    def to_dict(self):
        return {
            "id": self.id,
            "value": self.value,
            "timestamp": isoformat(self.timestamp),
            "seriesId": self.series_id,
            "seriesName": self.series.name,
            "seriesUnit": self.series.unit,
            "seriesColor": self.series.color,
            "notes": self.notes,
            "sensorId": self.sensor_id,
            "sensorName": self.sensor.name if self.sensor else None,
            "userId": self.user_id,
            "createdAt": isoformat(self.created_at),
        }
