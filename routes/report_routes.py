from flask import Blueprint, jsonify

from database.mongo import get_collections
from services import report_service
from utils.decorators import login_required

report_bp = Blueprint("reports", __name__)


@report_bp.route("/student/<student_id>/course/<course_id>", methods=["GET"])
@login_required
def student_progress(caller, student_id, course_id):
    report = report_service.student_progress(get_collections(), caller, student_id, course_id)
    return jsonify(report), 200
