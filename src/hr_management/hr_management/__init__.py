"""HR Management package.

This package is organized by feature modules (employees, departments,
attendance, leave, tokens, ...) with a thin Flask JSON controller layer and
service/repository layers underneath.
"""
