"""
Expense Input Normalizer
Reconciles itemized vs. aggregate expense entry into one resolved snapshot.

Money fields that are negative or non-numeric clamp to 0 and percentages clamp
to [0, 100]; both are recorded so the composer can warn about them. Missing or
unusable company facts raise ExpenseValidationError before any computation.

Keys are accepted in snake_case or in the camelCase used by the web forms.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

logger = logging.getLogger(__name__)

MIN_TAX_YEAR = 1900
MAX_TAX_YEAR = 2100
MAX_PRIOR_YEARS = 3


# ============================================================================
# Validation Errors
# ============================================================================

@dataclass(frozen=True)
class FieldError:
    """A single field-level validation problem"""
    field: str
    message: str

    def to_dict(self) -> dict:
        return {"code": "INVALID_INPUT", "message": self.message, "target": self.field}


class ExpenseValidationError(ValueError):
    """Raised when the input cannot be computed safely."""

    def __init__(self, errors: List[FieldError]):
        self.errors = list(errors)
        summary = "; ".join(f"{e.field}: {e.message}" for e in self.errors)
        super().__init__(f"Invalid calculation input - {summary}")


# ============================================================================
# Normalized Input Types
# ============================================================================

@dataclass(frozen=True)
class EmployeeWage:
    salary: float
    rd_time_pct: float
    benefits_rate: float


@dataclass(frozen=True)
class ItemizedWages:
    """Per-employee wage entry"""
    employees: Tuple[EmployeeWage, ...]
    kind: str = "itemized"


@dataclass(frozen=True)
class AggregateWages:
    """Headcount x average salary x allocation entry"""
    technical_employees: float
    avg_salary: float
    rd_allocation_pct: float
    kind: str = "aggregate"


WageEntry = Union[ItemizedWages, AggregateWages]


@dataclass(frozen=True)
class SupplyItem:
    description: str
    cost: float
    rd_allocation: float


@dataclass(frozen=True)
class CloudSoftwareItem:
    description: str
    annual_amount: float
    billing: str  # monthly | annual
    rd_allocation: float


@dataclass(frozen=True)
class NormalizedInput:
    """Resolved, clamped input snapshot consumed by the engine"""
    wages: WageEntry
    contractor_cost: float
    contractor_rd_time_pct: float
    supplies: Tuple[SupplyItem, ...]
    cloud_and_software: Tuple[CloudSoftwareItem, ...]
    is_first_time_filer: bool
    prior_year_qres: Tuple[float, ...]
    gross_receipts: float
    years_in_business: int
    tax_year: int
    corporate_tax_rate: Optional[float]
    business_type: Optional[str]
    substituted_defaults: Tuple[str, ...]
    clamped_fields: Tuple[str, ...]
    prior_payroll_elections: int = 0

    @property
    def is_itemized(self) -> bool:
        return isinstance(self.wages, ItemizedWages)


# ============================================================================
# Coercion Helpers
# ============================================================================

def _pick(data: Mapping[str, Any], *keys: str) -> Any:
    """Return the first non-None value among the given key aliases."""
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


class _Collector:
    """Tracks clamped and defaulted fields while a snapshot is normalized."""

    def __init__(self):
        self.clamped: List[str] = []
        self.substituted: List[str] = []

    def amount(self, value: Any, field_name: str) -> float:
        if value is None:
            return 0.0
        number = _as_number(value)
        if number is None or number < 0:
            self.clamped.append(field_name)
            return 0.0
        return number

    def percent(self, value: Any, field_name: str, default: float) -> float:
        if value is None:
            self.substituted.append(field_name)
            return default
        number = _as_number(value)
        if number is None:
            self.clamped.append(field_name)
            return 0.0
        if number < 0:
            self.clamped.append(field_name)
            return 0.0
        if number > 100:
            self.clamped.append(field_name)
            return 100.0
        return number


# ============================================================================
# Section Normalizers
# ============================================================================

def _normalize_wages(data: Mapping[str, Any], c: _Collector) -> WageEntry:
    employees = _pick(data, "employees") or []

    if isinstance(employees, (list, tuple)) and employees:
        items = []
        for i, emp in enumerate(employees):
            emp = emp if isinstance(emp, Mapping) else {}
            prefix = f"employees[{i}]"
            items.append(EmployeeWage(
                salary=c.amount(_pick(emp, "salary"), f"{prefix}.salary"),
                rd_time_pct=c.percent(_pick(emp, "rd_time_pct", "rdTimePct"), f"{prefix}.rd_time_pct", 100.0),
                benefits_rate=c.percent(_pick(emp, "benefits_rate", "benefitsRate"), f"{prefix}.benefits_rate", 0.0),
            ))
        return ItemizedWages(employees=tuple(items))

    count = _pick(data, "technical_employees", "technicalEmployees")
    salary = _pick(data, "avg_salary", "avgSalary", "averageTechnicalSalary")

    if count is None and salary is None:
        c.substituted.append("wages")
        return AggregateWages(technical_employees=0.0, avg_salary=0.0, rd_allocation_pct=0.0)

    return AggregateWages(
        technical_employees=c.amount(count, "technical_employees"),
        avg_salary=c.amount(salary, "avg_salary"),
        rd_allocation_pct=c.percent(
            _pick(data, "rd_allocation_pct", "rdAllocationPct", "rdAllocationPercentage"),
            "rd_allocation_pct",
            100.0,
        ),
    )


def _normalize_supplies(data: Mapping[str, Any], c: _Collector) -> Tuple[SupplyItem, ...]:
    supplies = _pick(data, "supplies") or []

    if isinstance(supplies, (list, tuple)) and supplies:
        items = []
        for i, item in enumerate(supplies):
            item = item if isinstance(item, Mapping) else {}
            prefix = f"supplies[{i}]"
            items.append(SupplyItem(
                description=str(item.get("description") or f"Supply item {i + 1}"),
                cost=c.amount(_pick(item, "cost", "amount"), f"{prefix}.cost"),
                rd_allocation=c.percent(_pick(item, "rd_allocation", "rdAllocation"), f"{prefix}.rd_allocation", 100.0),
            ))
        return tuple(items)

    total = _pick(data, "supplies_cost", "suppliesCost", "suppliesCosts")
    if total is None:
        return ()
    return (SupplyItem(description="Supplies", cost=c.amount(total, "supplies_cost"), rd_allocation=100.0),)


def _normalize_cloud_software(data: Mapping[str, Any], c: _Collector) -> Tuple[CloudSoftwareItem, ...]:
    entries = _pick(data, "cloud_and_software", "cloudAndSoftware") or []

    if isinstance(entries, (list, tuple)) and entries:
        items = []
        for i, item in enumerate(entries):
            item = item if isinstance(item, Mapping) else {}
            prefix = f"cloud_and_software[{i}]"
            annual = _pick(item, "annual_cost", "annualCost")
            if annual is not None:
                amount = c.amount(annual, f"{prefix}.annual_cost")
                billing = "annual"
            else:
                amount = c.amount(_pick(item, "monthly_cost", "monthlyCost"), f"{prefix}.monthly_cost") * 12
                billing = "monthly"
            items.append(CloudSoftwareItem(
                description=str(item.get("description") or f"Cloud/software item {i + 1}"),
                annual_amount=amount,
                billing=billing,
                rd_allocation=c.percent(_pick(item, "rd_allocation", "rdAllocation"), f"{prefix}.rd_allocation", 100.0),
            ))
        return tuple(items)

    items = []
    software = _pick(data, "software_cost", "softwareCost", "softwareCosts")
    if software is not None:
        items.append(CloudSoftwareItem("Software", c.amount(software, "software_cost"), "annual", 100.0))
    cloud = _pick(data, "cloud_cost", "cloudCost", "cloudCosts")
    if cloud is not None:
        items.append(CloudSoftwareItem("Cloud computing", c.amount(cloud, "cloud_cost"), "annual", 100.0))
    return tuple(items)


def _normalize_prior_years(data: Mapping[str, Any], c: _Collector) -> Tuple[float, ...]:
    raw = _pick(data, "prior_year_qres", "priorYearQREs", "priorYearQres")
    if not isinstance(raw, (list, tuple)):
        return ()
    values = [c.amount(v, f"prior_year_qres[{i}]") for i, v in enumerate(raw)]
    return tuple(values[-MAX_PRIOR_YEARS:])


def _flag(value: Any, field_name: str, errors: List[FieldError]) -> bool:
    """Optional boolean; absent is False. Accepts JSON booleans or "true"/"false"."""
    if value is None or isinstance(value, bool):
        return bool(value)
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    errors.append(FieldError(field_name, f"{field_name} must be true or false"))
    return False


def _required_number(data: Mapping[str, Any], field_name: str, aliases: Tuple[str, ...],
                     errors: List[FieldError]) -> Optional[float]:
    value = _pick(data, field_name, *aliases)
    if value is None:
        errors.append(FieldError(field_name, f"{field_name} is required"))
        return None
    number = _as_number(value)
    if number is None:
        errors.append(FieldError(field_name, f"{field_name} must be a number"))
        return None
    if number < 0:
        errors.append(FieldError(field_name, f"{field_name} must be >= 0"))
        return None
    return number


def _normalize_company_facts(data: Mapping[str, Any]) -> Dict[str, Any]:
    errors: List[FieldError] = []

    gross_receipts = _required_number(
        data, "gross_receipts", ("grossReceipts", "currentYearRevenue"), errors)

    years = _required_number(data, "years_in_business", ("yearsInBusiness",), errors)
    if years is not None and years != int(years):
        errors.append(FieldError("years_in_business", "years_in_business must be a whole number"))
        years = None

    tax_year = _required_number(data, "tax_year", ("taxYear",), errors)
    if tax_year is not None and (tax_year != int(tax_year) or not MIN_TAX_YEAR <= tax_year <= MAX_TAX_YEAR):
        errors.append(FieldError("tax_year", f"tax_year must be a year between {MIN_TAX_YEAR} and {MAX_TAX_YEAR}"))
        tax_year = None

    corporate_rate = None
    raw_rate = _pick(data, "corporate_tax_rate", "corporateTaxRate")
    if raw_rate is not None:
        rate = _as_number(raw_rate)
        if rate is not None and 1 < rate <= 100:
            rate = rate / 100
        if rate is None or not 0 < rate < 1:
            errors.append(FieldError("corporate_tax_rate", "corporate_tax_rate must be between 0 and 1 (or 0-100%)"))
        else:
            corporate_rate = rate

    first_time = _flag(_pick(data, "is_first_time_filer", "isFirstTimeFiler"), "is_first_time_filer", errors)

    prior_elections = 0
    raw_elections = _pick(data, "prior_payroll_elections", "priorPayrollElections")
    if raw_elections is not None:
        elections = _as_number(raw_elections)
        if elections is None or elections < 0 or elections != int(elections):
            errors.append(FieldError("prior_payroll_elections", "prior_payroll_elections must be a whole number >= 0"))
        else:
            prior_elections = int(elections)

    if errors:
        raise ExpenseValidationError(errors)

    return {
        "is_first_time_filer": first_time,
        "gross_receipts": gross_receipts,
        "years_in_business": int(years),
        "tax_year": int(tax_year),
        "corporate_tax_rate": corporate_rate,
        "prior_payroll_elections": prior_elections,
    }


# ============================================================================
# Public Entry Point
# ============================================================================

def normalize_expense_input(data: Mapping[str, Any]) -> NormalizedInput:
    """
    Resolve a raw input mapping into a NormalizedInput.

    Raises:
        ExpenseValidationError: required company facts are missing or unusable
    """
    if not isinstance(data, Mapping):
        raise ExpenseValidationError([FieldError("input", "input must be an object")])

    facts = _normalize_company_facts(data)

    c = _Collector()
    wages = _normalize_wages(data, c)
    contractor_cost = c.amount(_pick(data, "contractor_cost", "contractorCost", "contractorCosts"), "contractor_cost")
    contractor_pct_raw = _pick(data, "contractor_rd_time_pct", "contractorRdTimePct")
    if contractor_pct_raw is None and contractor_cost == 0:
        contractor_rd_time_pct = 100.0
    else:
        contractor_rd_time_pct = c.percent(contractor_pct_raw, "contractor_rd_time_pct", 100.0)

    business_type = _pick(data, "business_type", "businessType")

    normalized = NormalizedInput(
        wages=wages,
        contractor_cost=contractor_cost,
        contractor_rd_time_pct=contractor_rd_time_pct,
        supplies=_normalize_supplies(data, c),
        cloud_and_software=_normalize_cloud_software(data, c),
        prior_year_qres=_normalize_prior_years(data, c),
        business_type=str(business_type) if business_type is not None else None,
        substituted_defaults=tuple(c.substituted),
        clamped_fields=tuple(c.clamped),
        **facts,
    )

    if normalized.clamped_fields:
        logger.info(f"[Normalizer] Clamped fields: {', '.join(normalized.clamped_fields)}")

    return normalized
