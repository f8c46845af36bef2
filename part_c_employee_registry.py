#!/usr/bin/env python3
"""
part_c_employee_registry.py

Employee registry persisted as a JSON array in a single file.

Every mutating call reads the whole file, applies a keyed-collection update
and writes the whole file back (last write wins). A missing file is treated
as an empty registry.

Typical usage:
    python part_c_employee_registry.py add "Jane Doe" Manager --email jane@example.com
    python part_c_employee_registry.py list
    python part_c_employee_registry.py --file staff.json delete 3
"""
from __future__ import annotations
import argparse
import json
import logging
import os
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import List, Optional, Sequence, Union

import pandas as pd

from keyed_store import ErrorKind, KeyedCollectionStore, Result

# Configuration
DEFAULT_FILENAME = os.getenv("EMPLOYEE_REGISTRY_FILE", "employees.json")

# Logging
logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger("EmployeeRegistry")

PathLike = Union[str, Path]


class RegistryFileError(ValueError):
    """The registry file exists but does not hold a JSON array of employees."""


@dataclass(frozen=True)
class Employee:
    name: str
    position: str
    id: Optional[int] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    hire_date: Optional[str] = None  # ISO date
    salary: Optional[float] = None


EMPLOYEE_FIELDS = [f.name for f in fields(Employee)]
EMPLOYEES: KeyedCollectionStore[Employee, Optional[int]] = KeyedCollectionStore(lambda e: e.id, name="employee")


def new_employee(name: str, position: str, **opts) -> Employee:
    """
    Create an Employee with the required name/position and any optional fields.

    Raises TypeError for unknown field names.
    """
    return Employee(name=name, position=position, **opts)


# ---------------- File access ----------------
def read_all_employees(filename: PathLike = DEFAULT_FILENAME) -> List[Employee]:
    """
    Read every employee from the JSON file.

    Returns an empty list if the file does not exist.

    Raises:
        RegistryFileError: if the file is not a JSON array of employee objects.
    """
    p = Path(filename)
    if not p.exists():
        return []
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise RegistryFileError(f"{p}: invalid JSON ({e})") from e
    if not isinstance(data, list):
        raise RegistryFileError(f"{p}: expected a JSON array")
    out = []
    for item in data:
        try:
            out.append(Employee(**{k: v for k, v in item.items() if k in EMPLOYEE_FIELDS}))
        except (AttributeError, TypeError) as e:
            raise RegistryFileError(f"{p}: malformed employee entry {item!r}") from e
    return out


def save_employees(employees: Sequence[Employee], filename: PathLike = DEFAULT_FILENAME) -> None:
    """Overwrite the JSON file with `employees`."""
    p = Path(filename)
    p.write_text(json.dumps([asdict(e) for e in employees], ensure_ascii=False, indent=2), encoding="utf-8")
    logger.debug("Saved %d employees to %s", len(employees), p)


def next_id(employees: Sequence[Employee]) -> int:
    """Highest existing id plus one; 1 for an empty registry."""
    ids = [e.id for e in employees if e.id is not None]
    return max(ids, default=0) + 1


# ---------------- Operations ----------------
def read_employee_by_id(employee_id: int, filename: PathLike = DEFAULT_FILENAME) -> Result[Employee]:
    employee = EMPLOYEES.find(read_all_employees(filename), employee_id)
    if employee is None:
        return Result.failure(ErrorKind.NOT_FOUND, f"Employee not found: {employee_id}")
    return Result.success(employee)


def write_employee(employee: Employee, filename: PathLike = DEFAULT_FILENAME) -> Employee:
    """
    Store a new employee, assigning the next free id.

    Any id already set on `employee` is replaced. Returns the stored employee.
    """
    employees = read_all_employees(filename)
    stored = replace(employee, id=next_id(employees))
    save_employees(EMPLOYEES.add(employees, stored), filename)
    logger.info("Added employee %s (%s)", stored.id, stored.name)
    return stored


def update_employee(employee: Employee, filename: PathLike = DEFAULT_FILENAME) -> Result[Employee]:
    """
    Replace the stored employee that has the same id.

    Returns a failed Result (NOT_FOUND) and leaves the file untouched when no
    employee has that id.
    """
    employees = read_all_employees(filename)
    if not EMPLOYEES.contains(employees, employee.id):
        logger.warning("Employee not found: %s", employee.id)
        return Result.failure(ErrorKind.NOT_FOUND, f"Employee not found: {employee.id}")
    save_employees(EMPLOYEES.replace(employees, employee.id, employee), filename)
    logger.info("Updated employee %s", employee.id)
    return Result.success(employee)


def delete_employee(employee_id: int, filename: PathLike = DEFAULT_FILENAME) -> List[Employee]:
    """Remove the employee with `employee_id`; a missing id is a no-op. Returns the remaining employees."""
    employees = read_all_employees(filename)
    remaining = EMPLOYEES.remove(employees, employee_id)
    if len(remaining) == len(employees):
        logger.debug("Delete of unknown employee %s ignored", employee_id)
    else:
        logger.info("Deleted employee %s", employee_id)
    save_employees(remaining, filename)
    return remaining


def employees_frame(employees: Sequence[Employee]) -> pd.DataFrame:
    return pd.DataFrame([asdict(e) for e in employees], columns=EMPLOYEE_FIELDS)


# ---------------- CLI ----------------
def _optional_fields(args: argparse.Namespace) -> dict:
    return {k: getattr(args, k) for k in ("email", "phone", "hire_date", "salary") if getattr(args, k) is not None}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Part C: Employee registry (JSON file)")
    parser.add_argument("--file", default=DEFAULT_FILENAME, help="Path to the registry JSON file")
    sub = parser.add_subparsers(dest="command", required=True)

    def add_optional(p):
        p.add_argument("--email")
        p.add_argument("--phone")
        p.add_argument("--hire-date", dest="hire_date", help="ISO date, e.g. 2024-03-01")
        p.add_argument("--salary", type=float)

    p_add = sub.add_parser("add", help="Add an employee")
    p_add.add_argument("name")
    p_add.add_argument("position")
    add_optional(p_add)

    sub.add_parser("list", help="List all employees")

    p_show = sub.add_parser("show", help="Show one employee")
    p_show.add_argument("id", type=int)

    p_update = sub.add_parser("update", help="Update fields of an employee")
    p_update.add_argument("id", type=int)
    p_update.add_argument("--name")
    p_update.add_argument("--position")
    add_optional(p_update)

    p_delete = sub.add_parser("delete", help="Delete an employee")
    p_delete.add_argument("id", type=int)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the registry CLI. Returns the process exit code."""
    args = build_parser().parse_args(argv)
    try:
        if args.command == "add":
            stored = write_employee(new_employee(args.name, args.position, **_optional_fields(args)), args.file)
            print(f"Added employee {stored.id}.")
        elif args.command == "list":
            df = employees_frame(read_all_employees(args.file))
            print(df.to_string(index=False) if not df.empty else "No employees.")
        elif args.command == "show":
            res = read_employee_by_id(args.id, args.file)
            if not res.ok:
                print(f"Error: {res.message}")
                return 1
            print(employees_frame([res.value]).to_string(index=False))
        elif args.command == "update":
            current = read_employee_by_id(args.id, args.file)
            if not current.ok:
                print(f"Error: {current.message}")
                return 1
            changes = _optional_fields(args)
            if args.name is not None:
                changes["name"] = args.name
            if args.position is not None:
                changes["position"] = args.position
            res = update_employee(replace(current.value, **changes), args.file)
            if not res.ok:
                print(f"Error: {res.message}")
                return 1
            print(f"Updated employee {args.id}.")
        elif args.command == "delete":
            delete_employee(args.id, args.file)
            print(f"Deleted employee {args.id}.")
    except RegistryFileError as e:
        print(f"Error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
