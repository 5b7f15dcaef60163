from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from threading import Event
from typing import BinaryIO, Callable, List, Optional, Sequence, Union

import structlog

from ..bulk.excel import read_sheet, write_sheet
from ..bulk.reconciliation import cell_text, reconcile
from ..common.datetime_utils import now_utc
from ..common.validators import require_length_between, require_min_length, require_non_empty
from ..core.constants import SERVICE_ACCOUNT
from ..core.exceptions import DepartmentNotFound, DuplicateDepartmentCode, DuplicateDepartmentName, InvalidDepartmentData
from .model import Department
from .repository import DepartmentRepository

logger = structlog.get_logger(__name__)

IMPORT_REQUIRED_COLUMNS = ("name", "code")
EXPORT_COLUMNS = ("DepartmentId", "Name", "Code", "Description")


class DepartmentService:
    """Use case: manage departments."""

    def __init__(self, departments: DepartmentRepository, *, clock: Callable[[], datetime] = now_utc):
        self._departments = departments
        self._clock = clock

    def list_all(self) -> Sequence[Department]:
        return self._departments.list_all()

    def get_by_id(self, department_id: int) -> Department:
        department = self._departments.get_by_id(int(department_id))
        if not department:
            raise DepartmentNotFound(department_id)
        return department

    def create(self, *, name: str, code: str, description: str = "", actor: str = SERVICE_ACCOUNT) -> Department:
        name = require_non_empty(name, "Name", error=InvalidDepartmentData)
        require_min_length(name, "Name", 2, error=InvalidDepartmentData)
        code = require_non_empty(code, "Code", error=InvalidDepartmentData).upper()
        require_length_between(code, "Code", 2, 10, error=InvalidDepartmentData)

        if self._departments.get_by_name(name):
            raise DuplicateDepartmentName(name)
        if self._departments.get_by_code(code):
            raise DuplicateDepartmentCode(code)

        department = Department(
            department_id=0,
            name=name,
            code=code,
            description=(description or "").strip(),
            created_at=self._clock(),
        )
        department_id = self._departments.add(department)
        logger.info("department_created", department_id=department_id, code=code, actor=actor)
        return replace(department, department_id=department_id)

    def update(
        self,
        department_id: int,
        *,
        name: Optional[str] = None,
        description: Optional[str] = None,
        actor: str = SERVICE_ACCOUNT,
    ) -> Department:
        department = self.get_by_id(department_id)

        if name is not None:
            name = require_non_empty(name, "Name", error=InvalidDepartmentData)
            require_min_length(name, "Name", 2, error=InvalidDepartmentData)
            other = self._departments.get_by_name(name)
            if other and other.department_id != department.department_id:
                raise DuplicateDepartmentName(name)
            department = replace(department, name=name)
        if description is not None:
            department = replace(department, description=description.strip())

        self._departments.update(department)
        logger.info("department_updated", department_id=department.department_id, actor=actor)
        return department

    def delete(self, department_id: int, *, actor: str = SERVICE_ACCOUNT) -> None:
        self.get_by_id(department_id)
        self._departments.delete(int(department_id))
        logger.info("department_deleted", department_id=int(department_id), actor=actor)

    def import_file(
        self,
        source: Union[BinaryIO, bytes],
        *,
        actor: str = SERVICE_ACCOUNT,
        cancel: Optional[Event] = None,
    ) -> List[Department]:
        sheet = read_sheet(source)
        return reconcile(
            sheet,
            lambda row: self.create(
                name=cell_text(row, "name"),
                code=cell_text(row, "code"),
                description=cell_text(row, "description"),
                actor=actor,
            ),
            required_columns=IMPORT_REQUIRED_COLUMNS,
            entity="departments",
            cancel=cancel,
        )

    def export_excel(self) -> bytes:
        rows = [
            {"DepartmentId": d.department_id, "Name": d.name, "Code": d.code, "Description": d.description}
            for d in self._departments.list_all()
        ]
        return write_sheet(rows, "Departments", columns=EXPORT_COLUMNS)
