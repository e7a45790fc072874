import os

from . import create_app
from .models import db
from .seed import seed_database


def main():
    app = create_app()
    with app.app_context():
        db.create_all()
        seed_database(app.config["SEED_ADMIN_PASSWORD"])
    app.run(host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "8000")),
            debug=os.getenv("FLASK_DEBUG", "False").lower() == "true")


if __name__ == "__main__":
    main()
