from __future__ import annotations

import io

from flask import Flask, jsonify, send_file

from ..bulk.excel import XLSX_MIMETYPE
from ..container import Container
from ..core.enums import Role
from ..web.guards import current_actor, token_required
from ..web.payload import json_body, uploaded_file
from ..web.serialization import dump


def register(app: Flask, container: Container) -> None:
    service = container.department_service
    authenticated = token_required(container.issuer)
    hr_only = token_required(container.issuer, roles=(Role.ADMIN, Role.MANAGER))

    @app.route("/api/departments", methods=["GET"], endpoint="departments_list")
    @authenticated
    def list_departments():
        return jsonify(dump(service.list_all()))

    @app.route("/api/departments/<int:department_id>", methods=["GET"], endpoint="departments_get")
    @authenticated
    def get_department(department_id: int):
        return jsonify(dump(service.get_by_id(department_id)))

    @app.route("/api/departments", methods=["POST"], endpoint="departments_create")
    @hr_only
    def create_department():
        data = json_body()
        department = service.create(
            name=data.get("name", ""),
            code=data.get("code", ""),
            description=data.get("description", ""),
            actor=current_actor(),
        )
        return jsonify(dump(department)), 201

    @app.route("/api/departments/<int:department_id>", methods=["PUT"], endpoint="departments_update")
    @hr_only
    def update_department(department_id: int):
        data = json_body()
        department = service.update(
            department_id,
            name=data.get("name"),
            description=data.get("description"),
            actor=current_actor(),
        )
        return jsonify(dump(department))

    @app.route("/api/departments/<int:department_id>", methods=["DELETE"], endpoint="departments_delete")
    @hr_only
    def delete_department(department_id: int):
        service.delete(department_id, actor=current_actor())
        return "", 204

    @app.route("/api/departments/import", methods=["POST"], endpoint="departments_import")
    @hr_only
    def import_departments():
        created = service.import_file(uploaded_file(), actor=current_actor())
        return jsonify({"imported": len(created), "items": dump(created)}), 201

    @app.route("/api/departments/export", methods=["GET"], endpoint="departments_export")
    @authenticated
    def export_departments():
        return send_file(
            io.BytesIO(service.export_excel()),
            mimetype=XLSX_MIMETYPE,
            as_attachment=True,
            download_name="departments.xlsx",
        )
