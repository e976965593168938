from flask import Blueprint, jsonify, request

from database.mongo import get_collections
from services import auth_service
from utils.decorators import login_required
from utils.validators import json_object

auth_bp = Blueprint("auth", __name__)


# Registration Route
@auth_bp.route("/register", methods=["POST"])
def register():
    data = json_object(request.get_json(silent=True))
    return jsonify(auth_service.register(get_collections(), data)), 201


# Login Route
@auth_bp.route("/login", methods=["POST"])
def login():
    data = json_object(request.get_json(silent=True))
    return jsonify(auth_service.login(get_collections(), data)), 200


@auth_bp.route("/me", methods=["GET"])
@login_required
def me(caller):
    return jsonify(auth_service.get_me(get_collections(), caller)), 200


# Used by the frontend to decide whether the next sign-up becomes the trainer
@auth_bp.route("/check-trainer", methods=["GET"])
def check_trainer():
    return jsonify({"has_trainer": auth_service.trainer_assigned(get_collections())}), 200
