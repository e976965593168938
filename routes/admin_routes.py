from flask import Blueprint, jsonify, request

from database.mongo import get_collections
from services import user_service
from utils.decorators import login_required
from utils.validators import json_object

admin_bp = Blueprint("admin", __name__)


@admin_bp.route("/users", methods=["GET"])
@login_required
def list_users(caller):
    return jsonify(user_service.list_users(get_collections(), caller)), 200


@admin_bp.route("/users", methods=["POST"])
@login_required
def create_user(caller):
    data = json_object(request.get_json(silent=True))
    return jsonify(user_service.create_user(get_collections(), caller, data)), 201


@admin_bp.route("/users/<user_id>", methods=["PUT"])
@login_required
def update_user(caller, user_id):
    data = json_object(request.get_json(silent=True))
    return jsonify(user_service.update_user(get_collections(), caller, user_id, data)), 200


@admin_bp.route("/users/<user_id>", methods=["DELETE"])
@login_required
def delete_user(caller, user_id):
    return jsonify(user_service.delete_user(get_collections(), caller, user_id)), 200


@admin_bp.route("/users/<user_id>/change-password", methods=["PUT"])
@login_required
def change_password(caller, user_id):
    data = json_object(request.get_json(silent=True))
    return jsonify(user_service.change_password(get_collections(), caller, user_id, data)), 200
