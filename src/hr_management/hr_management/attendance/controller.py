from __future__ import annotations

import io

from flask import Flask, jsonify, request, send_file

from ..bulk.excel import XLSX_MIMETYPE
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..web.guards import current_actor, token_required
from ..web.payload import (
    json_body,
    opt_date,
    opt_duration,
    opt_time,
    query_date,
    req_int,
    uploaded_file,
)
from ..web.serialization import dump
from .model import AttendancePatch, NewAttendance


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service
    authenticated = token_required(container.issuer)
    hr_only = token_required(container.issuer, roles=(Role.ADMIN, Role.MANAGER))

    @app.route("/api/attendances", methods=["GET"], endpoint="attendance_list")
    @authenticated
    def list_attendance():
        if "startDate" in request.args or "endDate" in request.args:
            records = service.list_by_date_range(query_date("startDate"), query_date("endDate"))
        else:
            records = service.list_all()
        return jsonify(dump(records))

    @app.route("/api/attendances/<int:attendance_id>", methods=["GET"], endpoint="attendance_get")
    @authenticated
    def get_attendance(attendance_id: int):
        return jsonify(dump(service.get_by_id(attendance_id)))

    @app.route("/api/employees/<int:employee_id>/attendances", methods=["GET"], endpoint="attendance_by_employee")
    @authenticated
    def list_employee_attendance(employee_id: int):
        if "date" in request.args:
            return jsonify(dump(service.get_for_employee_and_date(employee_id, query_date("date"))))
        return jsonify(dump(service.list_for_employee(employee_id)))

    @app.route("/api/attendances", methods=["POST"], endpoint="attendance_create")
    @hr_only
    def create_attendance():
        data = json_body()
        work_date = opt_date(data, "date")
        if work_date is None:
            raise ValidationError("'date' is required.")
        record = service.create(
            NewAttendance(
                employee_id=req_int(data, "employeeId"),
                work_date=work_date,
                clock_in=opt_time(data, "clockIn"),
                clock_out=opt_time(data, "clockOut"),
                break_duration=opt_duration(data, "breakDuration"),
                notes=data.get("notes"),
            ),
            actor=current_actor(),
        )
        return jsonify(dump(record)), 201

    @app.route("/api/attendances/<int:attendance_id>", methods=["PUT"], endpoint="attendance_update")
    @hr_only
    def update_attendance(attendance_id: int):
        data = json_body()
        patch = AttendancePatch(
            clock_in=opt_time(data, "clockIn"),
            clock_out=opt_time(data, "clockOut"),
            break_duration=opt_duration(data, "breakDuration"),
            notes=data.get("notes"),
        )
        return jsonify(dump(service.update(attendance_id, patch, actor=current_actor())))

    @app.route("/api/attendances/<int:attendance_id>", methods=["DELETE"], endpoint="attendance_delete")
    @hr_only
    def delete_attendance(attendance_id: int):
        service.delete(attendance_id, actor=current_actor())
        return "", 204

    @app.route("/api/employees/<int:employee_id>/clock-in", methods=["POST"], endpoint="attendance_clock_in")
    @authenticated
    def clock_in(employee_id: int):
        return jsonify(dump(service.clock_in(employee_id, actor=current_actor()))), 201

    @app.route("/api/employees/<int:employee_id>/clock-out", methods=["POST"], endpoint="attendance_clock_out")
    @authenticated
    def clock_out(employee_id: int):
        return jsonify(dump(service.clock_out(employee_id, actor=current_actor())))

    @app.route("/api/attendances/import", methods=["POST"], endpoint="attendance_import")
    @hr_only
    def import_attendance():
        created = service.import_file(uploaded_file(), actor=current_actor())
        return jsonify({"imported": len(created), "items": dump(created)}), 201

    @app.route("/api/attendances/export", methods=["GET"], endpoint="attendance_export")
    @authenticated
    def export_attendance():
        return send_file(
            io.BytesIO(service.export_excel()),
            mimetype=XLSX_MIMETYPE,
            as_attachment=True,
            download_name="attendances.xlsx",
        )
