from __future__ import annotations

import io

from flask import Flask, jsonify, request, send_file

from ..bulk.excel import XLSX_MIMETYPE
from ..container import Container
from ..core.enums import Role
from ..web.guards import current_actor, token_required
from ..web.payload import json_body, opt_date, req_int, uploaded_file
from ..web.serialization import dump
from .model import LeavePatch, NewLeaveRequest


def register(app: Flask, container: Container) -> None:
    service = container.leave_service
    authenticated = token_required(container.issuer)
    reviewers = token_required(container.issuer, roles=(Role.ADMIN, Role.MANAGER))

    @app.route("/api/leave-requests", methods=["GET"], endpoint="leave_list")
    @authenticated
    def list_leave_requests():
        status = request.args.get("status")
        if status:
            return jsonify(dump(service.list_by_status(status)))
        return jsonify(dump(service.list_all()))

    @app.route("/api/leave-requests/pending", methods=["GET"], endpoint="leave_pending")
    @reviewers
    def list_pending_leave_requests():
        return jsonify(dump(service.list_pending()))

    @app.route("/api/leave-requests/<int:leave_request_id>", methods=["GET"], endpoint="leave_get")
    @authenticated
    def get_leave_request(leave_request_id: int):
        return jsonify(dump(service.get_by_id(leave_request_id)))

    @app.route("/api/employees/<int:employee_id>/leave-requests", methods=["GET"], endpoint="leave_by_employee")
    @authenticated
    def list_employee_leave_requests(employee_id: int):
        return jsonify(dump(service.list_for_employee(employee_id)))

    @app.route("/api/leave-requests", methods=["POST"], endpoint="leave_create")
    @authenticated
    def create_leave_request():
        data = json_body()
        leave_request = service.create(
            NewLeaveRequest(
                employee_id=req_int(data, "employeeId"),
                leave_type=data.get("leaveType"),
                start_date=opt_date(data, "startDate"),
                end_date=opt_date(data, "endDate"),
                reason=data.get("reason") or "",
            ),
            actor=current_actor(),
        )
        return jsonify(dump(leave_request)), 201

    @app.route("/api/leave-requests/<int:leave_request_id>/approve", methods=["POST"], endpoint="leave_approve")
    @reviewers
    def approve_leave_request(leave_request_id: int):
        data = request.get_json(silent=True) or {}
        return jsonify(dump(service.approve(leave_request_id, current_actor(), data.get("comments"))))

    @app.route("/api/leave-requests/<int:leave_request_id>/reject", methods=["POST"], endpoint="leave_reject")
    @reviewers
    def reject_leave_request(leave_request_id: int):
        data = request.get_json(silent=True) or {}
        return jsonify(dump(service.reject(leave_request_id, current_actor(), data.get("comments"))))

    @app.route("/api/leave-requests/<int:leave_request_id>", methods=["PUT"], endpoint="leave_update")
    @reviewers
    def update_leave_request(leave_request_id: int):
        data = json_body()
        patch = LeavePatch(status=data.get("status"), manager_comments=data.get("managerComments"))
        return jsonify(dump(service.update(leave_request_id, patch, actor=current_actor())))

    @app.route("/api/leave-requests/<int:leave_request_id>", methods=["DELETE"], endpoint="leave_delete")
    @reviewers
    def delete_leave_request(leave_request_id: int):
        service.delete(leave_request_id, actor=current_actor())
        return "", 204

    @app.route("/api/leave-requests/import", methods=["POST"], endpoint="leave_import")
    @reviewers
    def import_leave_requests():
        created = service.import_file(uploaded_file(), actor=current_actor())
        return jsonify({"imported": len(created), "items": dump(created)}), 201

    @app.route("/api/leave-requests/export", methods=["GET"], endpoint="leave_export")
    @authenticated
    def export_leave_requests():
        return send_file(
            io.BytesIO(service.export_excel()),
            mimetype=XLSX_MIMETYPE,
            as_attachment=True,
            download_name="leave_requests.xlsx",
        )
