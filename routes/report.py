from flask import Blueprint, jsonify

from utils.auth_context import get_login_service
from utils.timing import track

report_bp = Blueprint("report", __name__)


@report_bp.get("/report")
def report():
    result = get_login_service().build_report()
    with track("view"):
        resp = jsonify(result.to_dict())
    return resp, 200
