from flask import Blueprint, jsonify, request

from database.mongo import get_collections
from services import quiz_service
from utils.decorators import login_required
from utils.validators import json_object

quiz_bp = Blueprint("quiz", __name__)


# ---------------- TRAINER CREATE QUIZ ----------------
@quiz_bp.route("", methods=["POST"])
@login_required
def create_quiz(caller):
    data = json_object(request.get_json(silent=True))
    return jsonify(quiz_service.create_quiz(get_collections(), caller, data)), 201


# ---------------- STUDENT RESULTS ----------------
# Registered before /<quiz_id> so "my-results" is never read as a quiz id
@quiz_bp.route("/my-results", methods=["GET"])
@login_required
def my_results(caller):
    return jsonify(quiz_service.my_results(get_collections(), caller)), 200


# ---------------- TRAINER GET / UPDATE / DELETE QUIZ ----------------
@quiz_bp.route("/<quiz_id>", methods=["GET"])
@login_required
def get_quiz(caller, quiz_id):
    return jsonify(quiz_service.get_quiz(get_collections(), caller, quiz_id)), 200


@quiz_bp.route("/<quiz_id>", methods=["PUT"])
@login_required
def update_quiz(caller, quiz_id):
    data = json_object(request.get_json(silent=True))
    return jsonify(quiz_service.update_quiz(get_collections(), caller, quiz_id, data)), 200


@quiz_bp.route("/<quiz_id>", methods=["DELETE"])
@login_required
def delete_quiz(caller, quiz_id):
    return jsonify(quiz_service.delete_quiz(get_collections(), caller, quiz_id)), 200


# ---------------- TRAINER VIEW RESULTS ----------------
@quiz_bp.route("/<quiz_id>/results", methods=["GET"])
@login_required
def quiz_results(caller, quiz_id):
    return jsonify(quiz_service.quiz_results(get_collections(), caller, quiz_id)), 200


# ---------------- STUDENT TAKE / SUBMIT ----------------
@quiz_bp.route("/<quiz_id>/take", methods=["GET"])
@login_required
def take_quiz(caller, quiz_id):
    return jsonify(quiz_service.take_quiz(get_collections(), caller, quiz_id)), 200


@quiz_bp.route("/<quiz_id>/submit", methods=["POST"])
@login_required
def submit_quiz(caller, quiz_id):
    data = json_object(request.get_json(silent=True))
    return jsonify(quiz_service.submit_quiz(get_collections(), caller, quiz_id, data)), 201
