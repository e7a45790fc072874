import logging
import os
import random
import time

import httpx

logger = logging.getLogger(__name__)

API_URL = os.getenv("API_URL", "http://localhost:8000")
API_KEY = os.getenv("SENSOR_API_KEY", "TEMP_SALON_KEY")
VALUE_MIN = float(os.getenv("SIM_MIN", "20"))
VALUE_MAX = float(os.getenv("SIM_MAX", "25"))
INTERVAL = float(os.getenv("SIM_INTERVAL", "10"))


def make_reading(low=VALUE_MIN, high=VALUE_MAX):
    return {"value": round(random.uniform(low, high), 1)}


def send_reading(client, api_key, payload):
    response = client.post("/api/measurements/sensor", json=payload,
                           headers={"X-API-Key": api_key})
    response.raise_for_status()
    return response.json()


def run(client, api_key=API_KEY, interval=INTERVAL, count=None):
    sent = 0
    while count is None or sent < count:
        payload = make_reading()
        try:
            stored = send_reading(client, api_key, payload)
            logger.info("TX %s -> measurement %s", payload, stored["id"])
        except httpx.HTTPError as e:
            logger.error("Failed to send %s: %s", payload, e)
        sent += 1
        if count is None or sent < count:
            time.sleep(interval)
    return sent


def main():
    logging.basicConfig(level=logging.INFO)
    with httpx.Client(base_url=API_URL, timeout=10) as client:
        run(client)


if __name__ == "__main__":
    main()
