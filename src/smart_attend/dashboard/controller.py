from __future__ import annotations

from dataclasses import asdict
from functools import wraps

from flask import Flask, jsonify, request

from ..common.datetime_utils import current_month, current_year
from ..common.validators import optional_filter, require_month, require_page_size, require_year
from ..container import Container
from ..core.exceptions import DataUnavailableError, ValidationError
from .presentation import attendance_grade, type_breakdown


def register(app: Flask, container: Container) -> None:
    repo = container.attendance_repository

    def json_errors(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                return view(*args, **kwargs)
            except (ValidationError, ValueError) as e:
                return jsonify({"error": str(e)}), 400
            except DataUnavailableError as e:
                app.logger.error("Attendance data unavailable: %s", e)
                return jsonify({"error": str(e)}), 503

        return wrapper

    def _period():
        year = require_year(request.args.get("year") or current_year())
        month = require_month(request.args.get("month") or current_month())
        return year, month

    def _stats_json(stats) -> dict:
        out = asdict(stats)
        out["grade"] = attendance_grade(stats.percentage).value
        out["by_type"] = type_breakdown(stats)
        return out

    @app.route("/api/dashboard", methods=["GET"], endpoint="api_dashboard")
    @json_errors
    def api_dashboard():
        year, month = _period()
        group = optional_filter(request.args.get("group"))
        overview = repo.get_dashboard_overview(year, month, group)
        return jsonify(
            {
                "year": year,
                "month": month,
                "total_students": overview.total_students,
                "total_classes": overview.total_classes,
                "overall_attendance": overview.overall_attendance,
                **asdict(overview),
            }
        )

    @app.route("/api/subjects/<subject>", methods=["GET"], endpoint="api_subject_attendance")
    @json_errors
    def api_subject_attendance(subject: str):
        year, month = _period()
        group = optional_filter(request.args.get("group"))
        limit = require_page_size(request.args.get("limit") or app.config.get("DEFAULT_PAGE_SIZE", 50))
        after = optional_filter(request.args.get("after"))

        page = repo.get_subject_attendance(subject, year, month, group, page_size=limit, last_roll_number=after)
        return jsonify(
            {
                "subject": page.subject,
                "students": [
                    {"roll_number": s.roll_number, "name": s.name, "stats": _stats_json(s.stats)}
                    for s in page.students
                ],
                "has_more": page.has_more,
                "last_roll_number": page.last_roll_number,
            }
        )

    @app.route("/api/students/<roll_number>", methods=["GET"], endpoint="api_student_detail")
    @json_errors
    def api_student_detail(roll_number: str):
        year, month = _period()
        detail = repo.get_student_detail(roll_number, year, month)
        return jsonify(
            {
                "roll_number": roll_number,
                "year": year,
                "month": month,
                "subjects": {subject: _stats_json(stats) for subject, stats in detail.items()},
            }
        )

    @app.route("/api/filters", methods=["GET"], endpoint="api_filters")
    @json_errors
    def api_filters():
        year, month = _period()
        subjects, groups = repo.get_subjects_and_groups(year, month)
        return jsonify({"subjects": subjects, "groups": groups})

    @app.route("/api/months", methods=["GET"], endpoint="api_months")
    @json_errors
    def api_months():
        year = require_year(request.args.get("year") or current_year())
        return jsonify({"year": year, "months": repo.get_available_months(year)})

    @app.route("/api/cache/clear", methods=["POST"], endpoint="api_cache_clear")
    def api_cache_clear():
        repo.invalidate_cache()
        return jsonify({"ok": True})
