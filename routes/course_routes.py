from flask import Blueprint, jsonify, request

from database.mongo import get_collections
from services import course_service
from utils.decorators import login_required
from utils.validators import json_object

course_bp = Blueprint("courses", __name__)


@course_bp.route("", methods=["POST"])
@login_required
def create_course(caller):
    data = json_object(request.get_json(silent=True))
    return jsonify(course_service.create_course(get_collections(), caller, data)), 201


@course_bp.route("", methods=["GET"])
@login_required
def list_courses(caller):
    return jsonify(course_service.list_courses(get_collections(), caller)), 200


@course_bp.route("/<course_id>", methods=["GET"])
@login_required
def get_course(caller, course_id):
    return jsonify(course_service.get_course(get_collections(), caller, course_id)), 200


@course_bp.route("/<course_id>", methods=["PUT"])
@login_required
def update_course(caller, course_id):
    data = json_object(request.get_json(silent=True))
    return jsonify(course_service.update_course(get_collections(), caller, course_id, data)), 200


@course_bp.route("/<course_id>", methods=["DELETE"])
@login_required
def delete_course(caller, course_id):
    return jsonify(course_service.delete_course(get_collections(), caller, course_id)), 200
