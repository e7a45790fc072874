import logging
from datetime import datetime

from .auth import hash_password
from .models import Measurement, Sensor, Series, User, db

logger = logging.getLogger(__name__)

SEED_DATE = datetime(2024, 11, 1)

USERS = [
    ("admin", "admin@example.com"),
    ("jan_kowalski", "jan.kowalski@example.com"),
    ("anna_nowak", "anna.nowak@example.com"),
]

# name, description, min, max, unit, color, icon
SERIES = [
    ("Room temperature", "Indoor temperature", -10, 50, "°C", "#EF4444", "thermometer"),
    ("Air humidity", "Relative humidity", 0, 100, "%", "#3B82F6", "droplet"),
    ("Atmospheric pressure", "Air pressure", 950, 1050, "hPa", "#10B981", "gauge"),
    ("Light intensity", "Ambient brightness", 0, 10000, "lx", "#FBBF24", "sun"),
    ("CO₂ concentration", "Carbon dioxide in the air", 300, 2000, "ppm", "#6B7280", "cloud"),
]

# name, api key, series index, description
SENSORS = [
    ("Temperature sensor - Living room", "TEMP_SALON_KEY", 0, "DHT22 in the living room"),
    ("Humidity sensor - Living room", "HUM_SALON_KEY", 1, "DHT22 in the living room"),
    ("Pressure sensor - Balcony", "PRESS_OUT_KEY", 2, "BMP180 on the balcony"),
    ("Light sensor - Office", "LIGHT_OFFICE_KEY", 3, "LDR in the office"),
    ("CO2 sensor - Kitchen", "CO2_KITCHEN_KEY", 4, "MH-Z19B in the kitchen"),
]

# value, (day, hour), series/sensor index, user index
MEASUREMENTS = [
    (22.4, (1, 6), 0, 1), (23.1, (1, 12), 0, 1), (24.5, (2, 6), 0, 2),
    (48.3, (1, 6), 1, 1), (51.8, (1, 12), 1, 0), (55.2, (2, 6), 1, 2),
    (1013.2, (1, 6), 2, 0), (1011.7, (1, 12), 2, 1), (1008.5, (2, 6), 2, 2),
    (320.0, (1, 8), 3, 0), (750.0, (1, 14), 3, 0), (50.0, (1, 22), 3, 0),
    (420.0, (1, 6), 4, 0), (780.0, (1, 12), 4, 0), (610.0, (1, 18), 4, 2),
]


def seed_database(admin_password):
    """Load the demo data set. Returns False and does nothing if any user or series exists."""
    if User.query.first() is not None or Series.query.first() is not None:
        logger.info("Database already has data, skipping seed")
        return False

    password_hash = hash_password(admin_password)
    users = [User(username=username, email=email, password_hash=password_hash,
                  created_at=SEED_DATE)
             for username, email in USERS]

    series = [Series(name=name, description=description, min_value=low, max_value=high,
                     unit=unit, color=color, icon=icon, created_at=SEED_DATE)
              for name, description, low, high, unit, color, icon in SERIES]

    sensors = [Sensor(name=name, api_key=api_key, series=series[index],
                      description=description, created_at=SEED_DATE)
               for name, api_key, index, description in SENSORS]

    measurements = [Measurement(value=value, timestamp=datetime(2024, 11, day, hour),
                                series=series[index], sensor=sensors[index],
                                user=users[user_index], created_at=SEED_DATE)
                    for value, (day, hour), index, user_index in MEASUREMENTS]

    db.session.add_all(users + series + sensors + measurements)
    db.session.commit()
    logger.info("Seeded %d users, %d series, %d sensors, %d measurements",
                len(users), len(series), len(sensors), len(measurements))
    return True
