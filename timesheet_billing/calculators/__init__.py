"""Calculator modules for the billing engine.

Hierarchy:
1. Task -> calculate_task_billing()
2. Project -> calculate_project_billing() applies minimum/maximum/carryover
3. Company -> calculate_company_billing()
4. Month -> calculate_monthly_billing()
"""

from timesheet_billing.calculators.carryover import (
    CarryoverBatch,
    available_carryover,
    consume_carryover,
    parse_billing_month,
    roll_forward_carryover,
)
from timesheet_billing.calculators.project_billing import (
    BilledHoursResult,
    BillingAdjustment,
    BillingState,
    MaximumApplied,
    MaximumAppliedUnbillable,
    MinimumApplied,
    NoAdjustment,
    ProjectBillingResult,
    ProjectInput,
    calculate_billed_hours,
    calculate_billed_hours_from_tasks,
    calculate_project_billing,
    format_billing_adjustment,
    validate_min_max_limits,
)
from timesheet_billing.calculators.rollup_billing import (
    CompanyBillingResult,
    CompanyInput,
    MonthlyBillingResult,
    calculate_company_billing,
    calculate_monthly_billing,
)
from timesheet_billing.calculators.rounding import (
    apply_rounding,
    minutes_to_hours,
    round_currency,
    round_hours,
)
from timesheet_billing.calculators.task_billing import (
    TaskBillingResult,
    TaskInput,
    calculate_task_billing,
)

__all__ = [
    # rounding
    "apply_rounding",
    "minutes_to_hours",
    "round_currency",
    "round_hours",
    # task_billing
    "TaskBillingResult",
    "TaskInput",
    "calculate_task_billing",
    # project_billing
    "BilledHoursResult",
    "BillingAdjustment",
    "BillingState",
    "MaximumApplied",
    "MaximumAppliedUnbillable",
    "MinimumApplied",
    "NoAdjustment",
    "ProjectBillingResult",
    "ProjectInput",
    "calculate_billed_hours",
    "calculate_billed_hours_from_tasks",
    "calculate_project_billing",
    "format_billing_adjustment",
    "validate_min_max_limits",
    # rollup_billing
    "CompanyBillingResult",
    "CompanyInput",
    "MonthlyBillingResult",
    "calculate_company_billing",
    "calculate_monthly_billing",
    # carryover
    "CarryoverBatch",
    "available_carryover",
    "consume_carryover",
    "parse_billing_month",
    "roll_forward_carryover",
]
