from flask import Blueprint, jsonify, request

from database.mongo import get_collections
from services import user_service
from utils.decorators import login_required
from utils.validators import json_object

user_bp = Blueprint("users", __name__)


# ---------------- TRAINER: STUDENT ACCOUNTS ----------------
@user_bp.route("/students", methods=["GET"])
@login_required
def list_students(caller):
    return jsonify(user_service.list_students(get_collections(), caller)), 200


@user_bp.route("/students", methods=["POST"])
@login_required
def create_student(caller):
    data = json_object(request.get_json(silent=True))
    return jsonify(user_service.create_student(get_collections(), caller, data)), 201
