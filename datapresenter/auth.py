import logging

from flask import Blueprint, jsonify
from flask_bcrypt import Bcrypt
from flask_jwt_extended import JWTManager, create_access_token, get_jwt_identity, jwt_required
from sqlalchemy.exc import IntegrityError

from .errors import error_response
from .models import User, db, utcnow
from .validation import credentials_payload, json_body, string_field

logger = logging.getLogger(__name__)

bcrypt = Bcrypt()
jwt = JWTManager()

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def hash_password(password):
    return bcrypt.generate_password_hash(password).decode("utf-8")


def check_password(user, password):
    return bcrypt.check_password_hash(user.password_hash, password)


def issue_token(user):
    return create_access_token(
        identity=str(user.id),
        additional_claims={"username": user.username, "email": user.email},
    )


def duplicate_account(username, email):
    """Message explaining why the account cannot be created, or None."""
    if User.query.filter_by(username=username).first():
        return "A user with this username already exists"
    if User.query.filter_by(email=email).first():
        return "This email is already registered"
    return None


def current_user_id():
    return int(get_jwt_identity())


def auth_response(user, token):
    return {"token": token, "username": user.username, "email": user.email}


# flask-jwt-extended answers 422 for a malformed token; clients only handle 401
@jwt.invalid_token_loader
def invalid_token(reason):
    return error_response(reason, 401)


@jwt.expired_token_loader
def expired_token(_header, _payload):
    return error_response("Token has expired", 401)


# --- Endpoints ------------------------------------------------------

@auth_bp.route("/login", methods=["POST"])
def login():
    data = json_body()
    username = string_field(data, "username")
    password = string_field(data, "password", strip=False)

    user = User.query.filter_by(username=username).first()
    if user is None or not check_password(user, password):
        logger.info("Failed login for %r", username)
        return error_response("Invalid username or password", 401)

    user.last_login = utcnow()
    db.session.commit()
    logger.info("User %s logged in", user.username)
    return jsonify(auth_response(user, issue_token(user)))


@auth_bp.route("/register", methods=["POST"])
def register():
    username, email, password = credentials_payload(json_body())

    taken = duplicate_account(username, email)
    if taken:
        return error_response(taken, 400)

    user = User(username=username, email=email, password_hash=hash_password(password))
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        # a concurrent registration won the unique constraint
        db.session.rollback()
        return error_response("A user with this username or email already exists", 400)
    logger.info("Registered user %s", user.username)
    return jsonify(auth_response(user, issue_token(user))), 201


@auth_bp.route("/change-password", methods=["POST"])
@jwt_required()
def change_password():
    data = json_body()
    current_password = string_field(data, "currentPassword", strip=False)
    new_password = string_field(data, "newPassword", min_length=6, max_length=100,
                                strip=False)

    user = db.session.get(User, current_user_id())
    if user is None:
        return error_response("User not found", 404)

    if not check_password(user, current_password):
        return error_response("Current password is incorrect", 400)

    user.password_hash = hash_password(new_password)
    db.session.commit()
    logger.info("User %s changed password", user.username)
    return jsonify({"message": "Password changed successfully"})


@auth_bp.route("/me", methods=["GET"])
@jwt_required()
def me():
    user = db.session.get(User, current_user_id())
    if user is None:
        return error_response("User not found", 404)
    return jsonify(auth_response(user, ""))
