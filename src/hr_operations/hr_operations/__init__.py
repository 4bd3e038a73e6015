"""HR operations package.

Organized by feature modules (leave, attendance, payroll, employees) with
service/repository layers; concrete dependencies are wired in ``container``.
"""
