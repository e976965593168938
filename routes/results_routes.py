from flask import Blueprint, jsonify

from database.mongo import get_collections
from services import report_service
from utils.decorators import login_required

results_bp = Blueprint("results", __name__)


@results_bp.route("/my-results", methods=["GET"])
@login_required
def my_results(caller):
    return jsonify(report_service.my_results_summary(get_collections(), caller)), 200


# --- TRAINER: VIEW RESULTS BY COURSE ---
@results_bp.route("/course/<course_id>", methods=["GET"])
@login_required
def course_results(caller, course_id):
    return jsonify(report_service.course_results(get_collections(), caller, course_id)), 200
