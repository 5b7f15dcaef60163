from __future__ import annotations

import pytest

from src.hr_management.hr_management.bulk.excel import read_sheet, write_sheet
from src.hr_management.hr_management.core.exceptions import (
    DepartmentNotFound,
    DuplicateDepartmentCode,
    DuplicateDepartmentName,
    ImportFailed,
    InvalidDepartmentData,
)


@pytest.fixture
def service(container):
    return container.department_service


def test_create_uppercases_code(service):
    created = service.create(name="Finance", code="fin", description="Money")

    assert created.department_id == 1
    assert created.code == "FIN"


def test_duplicate_name_is_conflict(service):
    service.create(name="Finance", code="FIN")

    with pytest.raises(DuplicateDepartmentName) as exc:
        service.create(name="Finance", code="FN2")

    assert exc.value.status_code == 409
    assert exc.value.code == "DEPARTMENT_NAME_EXISTS"


def test_duplicate_code_is_conflict(service):
    service.create(name="Finance", code="FIN")

    with pytest.raises(DuplicateDepartmentCode):
        service.create(name="Financial Ops", code="fin")


@pytest.mark.parametrize("name, code", [("F", "FIN"), ("Finance", "F"), ("Finance", "ABCDEFGHIJK")])
def test_invalid_name_or_code(service, name, code):
    with pytest.raises(InvalidDepartmentData):
        service.create(name=name, code=code)


def test_rename_to_existing_name_is_conflict(service):
    service.create(name="Finance", code="FIN")
    other = service.create(name="Legal", code="LEG")

    with pytest.raises(DuplicateDepartmentName):
        service.update(other.department_id, name="Finance")


def test_delete_unknown(service):
    with pytest.raises(DepartmentNotFound):
        service.delete(42)


def test_import_persists_valid_rows(service, departments_repo):
    rows = [
        {"Name": "Finance", "Code": "FIN"},
        {"Name": "Legal", "Code": "LEG"},
        {"Name": "Ops", "Code": "X"},
        {"Name": "Sales", "Code": "SAL"},
        {"Name": "Support", "Code": "SUP"},
    ]
    content = write_sheet(rows, "Departments", columns=("Name", "Code"))

    with pytest.raises(ImportFailed) as exc:
        service.import_file(content)

    assert list(exc.value.errors) == ["Row 4"]
    assert sorted(d.name for d in departments_repo.list_all()) == ["Finance", "Legal", "Sales", "Support"]


def test_export_lists_departments(service):
    service.create(name="Finance", code="FIN")

    sheet = read_sheet(service.export_excel())

    assert sheet.columns == ("departmentid", "name", "code", "description")
    assert sheet.rows[0]["code"] == "FIN"
