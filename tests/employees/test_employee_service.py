from __future__ import annotations

import random
from datetime import date
from decimal import Decimal

import pytest

from src.hr_management.hr_management.bulk.excel import write_sheet
from src.hr_management.hr_management.core.constants import EMPLOYEE_CODE_MAX_RETRIES
from src.hr_management.hr_management.core.enums import Gender
from src.hr_management.hr_management.core.exceptions import (
    DepartmentNotFound,
    EmployeeNotFound,
    ImportFailed,
    InvalidEmployeeData,
)
from src.hr_management.hr_management.employees.model import EmployeePatch, NewEmployee
from src.hr_management.hr_management.employees.service import EmployeeService


class ConstantChoice(random.Random):
    def __init__(self, value: str):
        super().__init__()
        self.value = value
        self.calls = 0

    def choice(self, seq):
        self.calls += 1
        return self.value


def _new(department, **overrides):
    data = dict(
        first_name="John",
        last_name="Doe",
        gender=Gender.MALE,
        email="john.other@example.com",
        salary=Decimal("1200"),
        hire_date=date(2025, 1, 2),
        department_id=department.department_id,
    )
    data.update(overrides)
    return NewEmployee(**data)


@pytest.fixture
def service(container):
    return container.employee_service


def test_create_generates_code(employees_repo, departments_repo, department, clock):
    service = EmployeeService(employees_repo, departments_repo, rng=ConstantChoice("Z"), clock=clock)

    created = service.create(_new(department, first_name="mary", last_name="jones", email="Mary@Example.com"))

    assert created.unique_code == f"MAJOZ{department.department_id}"
    assert created.email == "mary@example.com"


def test_code_generation_gives_up_after_retries(employees_repo, departments_repo, department, employee, clock):
    rng = ConstantChoice("A")
    service = EmployeeService(employees_repo, departments_repo, rng=rng, clock=clock)

    with pytest.raises(InvalidEmployeeData):
        service.create(_new(department))

    assert rng.calls == EMPLOYEE_CODE_MAX_RETRIES + 1
    assert len(employees_repo.list_all()) == 1


def test_unknown_department(service, department):
    with pytest.raises(DepartmentNotFound):
        service.create(_new(department, department_id=999))


def test_duplicate_email_rejected(service, department, employee):
    with pytest.raises(InvalidEmployeeData):
        service.create(_new(department, email=employee.email))


def test_negative_salary_rejected(service, department):
    with pytest.raises(InvalidEmployeeData):
        service.create(_new(department, salary=Decimal("-1")))


@pytest.mark.parametrize("salary", [Decimal("NaN"), Decimal("Infinity"), "abc"])
def test_non_numeric_salary_rejected(service, department, employee, salary):
    with pytest.raises(InvalidEmployeeData):
        service.create(_new(department, salary=salary))
    with pytest.raises(InvalidEmployeeData):
        service.update(employee.employee_id, EmployeePatch(salary=salary))


def test_update_rechecks_department(service, employee):
    with pytest.raises(DepartmentNotFound):
        service.update(employee.employee_id, EmployeePatch(department_id=77))


def test_update_changes_fields(service, employee):
    updated = service.update(employee.employee_id, EmployeePatch(position="Lead", salary=Decimal("2000")))

    assert updated.position == "Lead"
    assert updated.salary == Decimal("2000")
    assert updated.first_name == employee.first_name


def test_get_by_email_unknown(service):
    with pytest.raises(EmployeeNotFound):
        service.get_by_email("ghost@example.com")


def test_import_reports_every_problem_in_a_row(service, department, employees_repo):
    columns = ("FirstName", "LastName", "Email", "DepartmentId", "HireDate", "Salary", "Gender")
    rows = [
        {
            "FirstName": "Ann",
            "LastName": "Lee",
            "Email": "ann.lee@example.com",
            "DepartmentId": str(department.department_id),
            "HireDate": "15/01/2025",
            "Salary": "1000",
            "Gender": "1",
        },
        {
            "FirstName": "",
            "LastName": "Kim",
            "Email": "kim@example.com",
            "DepartmentId": str(department.department_id),
            "HireDate": "someday",
            "Salary": "abc",
            "Gender": "0",
        },
    ]

    with pytest.raises(ImportFailed) as exc:
        service.import_file(write_sheet(rows, "Employees", columns=columns))

    assert len(exc.value.errors["Row 3"]) == 3
    assert [e.email for e in employees_repo.list_all()] == ["ann.lee@example.com"]


def test_import_empty_sheet_returns_nothing(service):
    content = write_sheet([], "Employees", columns=("FirstName",))

    assert service.import_file(content) == []
