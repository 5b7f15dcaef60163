from __future__ import annotations

import io

from flask import Flask, jsonify, send_file

from ..bulk.excel import XLSX_MIMETYPE
from ..container import Container
from ..core.enums import Role
from ..web.guards import current_actor, token_required
from ..web.payload import json_body, opt_date, opt_decimal, opt_int, req_int, uploaded_file
from ..web.serialization import dump
from .model import EmployeePatch, NewEmployee


def register(app: Flask, container: Container) -> None:
    service = container.employee_service
    authenticated = token_required(container.issuer)
    hr_only = token_required(container.issuer, roles=(Role.ADMIN, Role.MANAGER))

    @app.route("/api/employees", methods=["GET"], endpoint="employees_list")
    @authenticated
    def list_employees():
        return jsonify(dump(service.list_all()))

    @app.route("/api/employees/<int:employee_id>", methods=["GET"], endpoint="employees_get")
    @authenticated
    def get_employee(employee_id: int):
        return jsonify(dump(service.get_by_id(employee_id)))

    @app.route("/api/employees/by-email/<path:email>", methods=["GET"], endpoint="employees_by_email")
    @authenticated
    def get_employee_by_email(email: str):
        return jsonify(dump(service.get_by_email(email)))

    @app.route("/api/departments/<int:department_id>/employees", methods=["GET"], endpoint="employees_by_department")
    @authenticated
    def list_department_employees(department_id: int):
        return jsonify(dump(service.list_by_department(department_id)))

    @app.route("/api/employees", methods=["POST"], endpoint="employees_create")
    @hr_only
    def create_employee():
        data = json_body()
        employee = service.create(
            NewEmployee(
                first_name=data.get("firstName", ""),
                last_name=data.get("lastName", ""),
                gender=req_int(data, "gender"),
                email=data.get("email", ""),
                salary=opt_decimal(data, "salary"),
                hire_date=opt_date(data, "hireDate"),
                department_id=req_int(data, "departmentId"),
                phone_number=data.get("phoneNumber"),
                address=data.get("address"),
                position=data.get("position"),
            ),
            actor=current_actor(),
        )
        return jsonify(dump(employee)), 201

    @app.route("/api/employees/<int:employee_id>", methods=["PUT"], endpoint="employees_update")
    @hr_only
    def update_employee(employee_id: int):
        data = json_body()
        patch = EmployeePatch(
            first_name=data.get("firstName"),
            last_name=data.get("lastName"),
            gender=opt_int(data, "gender"),
            email=data.get("email"),
            salary=opt_decimal(data, "salary"),
            hire_date=opt_date(data, "hireDate"),
            department_id=opt_int(data, "departmentId"),
            phone_number=data.get("phoneNumber"),
            address=data.get("address"),
            position=data.get("position"),
        )
        return jsonify(dump(service.update(employee_id, patch, actor=current_actor())))

    @app.route("/api/employees/<int:employee_id>", methods=["DELETE"], endpoint="employees_delete")
    @hr_only
    def delete_employee(employee_id: int):
        service.delete(employee_id, actor=current_actor())
        return "", 204

    @app.route("/api/employees/import", methods=["POST"], endpoint="employees_import")
    @hr_only
    def import_employees():
        created = service.import_file(uploaded_file(), actor=current_actor())
        return jsonify({"imported": len(created), "items": dump(created)}), 201

    @app.route("/api/employees/export", methods=["GET"], endpoint="employees_export")
    @authenticated
    def export_employees():
        return send_file(
            io.BytesIO(service.export_excel()),
            mimetype=XLSX_MIMETYPE,
            as_attachment=True,
            download_name="employees.xlsx",
        )
