"""Example: drive the service layer directly.

Controllers are out of scope; services are plain objects wired by the container.
"""

from datetime import date

from hr_operations.main import create_container


def main():
    container = create_container()

    balance = container.leave_service.get_leave_balance(employee_id=1)
    print("leave balance:", dict(balance.remaining), "used:", dict(balance.used))

    history = container.attendance_service.get_attendance_by_employee(1)
    print("attendance this month:", history.summary)

    today = date.today()
    page = container.payroll_service.get_payroll_by_employee(1, page=1, limit=5)
    print(f"payrolls (as of {today}):", [(p.pay_period_start, p.net_pay, p.status.value) for p in page.items])


if __name__ == "__main__":
    main()
